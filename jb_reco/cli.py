# jb_reco/cli.py
"""
Command-line runner for the JB recommender.

- serve: run the HTTP API with uvicorn
- snapshot: load the catalog once and dump it to CSV (handy to eyeball
  the parsed notes / gender / price band of every product)
- recommend: score the live catalog for a JSON answer set and print
  the top matches
"""

from __future__ import annotations
import argparse
import asyncio
import json
from pathlib import Path
from typing import List

import pandas as pd

from jb_reco.catalog import CatalogLoader
from jb_reco.config import RESULT_LIMIT, Answers, CatalogItem, load_settings
from jb_reco.scoring import recommend


def catalog_to_frame(items: List[CatalogItem]) -> pd.DataFrame:
    rows = []
    for it in items:
        row = it.model_dump()
        for col in ("notes_top", "notes_heart", "notes_base", "tags", "profile", "occasion"):
            row[col] = ", ".join(row[col])
        rows.append(row)
    return pd.DataFrame(rows, columns=list(CatalogItem.model_fields))


def write_snapshot_csv(items: List[CatalogItem], out_path: Path) -> None:
    df = catalog_to_frame(items)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path, index=False)


def _cmd_serve(args) -> None:
    import uvicorn

    from jb_reco.api import create_app

    settings = load_settings()
    uvicorn.run(create_app(settings), host=args.host, port=args.port or settings.port)


def _cmd_snapshot(args) -> None:
    loader = CatalogLoader(load_settings())
    items = asyncio.run(loader.load())
    out = Path(args.out)
    write_snapshot_csv(items, out)
    print(f"Wrote {len(items)} products to {out}")


def _cmd_recommend(args) -> None:
    settings = load_settings()
    answers = Answers.from_query(args.answers)
    items = asyncio.run(CatalogLoader(settings).load())
    response = recommend(items, answers, limit=args.limit, currency_symbol=settings.currency_symbol)
    print(json.dumps(response.model_dump(by_alias=True), ensure_ascii=False, indent=2))


def main(argv: List[str] | None = None) -> None:
    ap = argparse.ArgumentParser(prog="jb-reco")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_serve = sub.add_parser("serve", help="run the HTTP API")
    p_serve.add_argument("--host", default="0.0.0.0")
    p_serve.add_argument("--port", type=int, default=None, help="defaults to $PORT or 3000")
    p_serve.set_defaults(func=_cmd_serve)

    p_snap = sub.add_parser("snapshot", help="dump the normalized catalog to CSV")
    p_snap.add_argument("--out", default="artifacts/catalog_snapshot.csv")
    p_snap.set_defaults(func=_cmd_snapshot)

    p_reco = sub.add_parser("recommend", help="print the top matches for a JSON answer set")
    p_reco.add_argument("--answers", default="{}", help='e.g. \'{"gender": "Femme"}\'')
    p_reco.add_argument("--limit", type=int, default=RESULT_LIMIT)
    p_reco.set_defaults(func=_cmd_recommend)

    args = ap.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
