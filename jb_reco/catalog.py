from __future__ import annotations

"""
Catalog loader for the storefront product list.

This module pages through the shop's non-archived products with the
GraphQL cursor protocol and normalizes each raw product into a
:class:`~jb_reco.config.CatalogItem`:

* the notes pyramid is parsed from the description
  (see :func:`~jb_reco.normalize.extract_notes`);
* gender is inferred from tags, title, vendor, product type, notes and
  description text;
* price comes from the first variant (0 when missing) and is banded;
* products without an image fall back to the shop CDN path built from
  the handle.

The full list is memoized on the loader for ``cache_ttl_seconds``.  A
refresh only replaces the cache once every page has been read, so a
failing upstream leaves the previous snapshot in place and the error
propagates to the caller.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from .config import (
    DEFAULT_CURRENCY_CODE,
    PRODUCTS_PAGE_SIZE,
    PRODUCTS_SEARCH_FILTER,
    CatalogItem,
    Settings,
)
from .normalize import basic_clean, extract_notes, infer_gender, price_band
from .storefront import StorefrontClient, StorefrontError


PRODUCTS_QUERY = """
query AllProducts($cursor: String, $first: Int!, $filter: String) {
  products(first: $first, after: $cursor, query: $filter) {
    pageInfo { hasNextPage }
    edges {
      cursor
      node {
        id handle title vendor productType tags
        descriptionHtml
        images(first: 1) { edges { node { url } } }
        variants(first: 1) { edges { node { id price { amount currencyCode } } } }
      }
    }
  }
}
"""


def _first_node(connection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    edges = (connection or {}).get("edges") or []
    if not edges:
        return {}
    return edges[0].get("node") or {}


def _to_price(raw: Any) -> float:
    try:
        return max(0.0, float(raw or 0))
    except (TypeError, ValueError):
        return 0.0


def normalize_product(node: Dict[str, Any], shop_domain: str) -> CatalogItem:
    """Convert one raw GraphQL product node into a :class:`CatalogItem`."""
    handle = node.get("handle") or ""
    title = node.get("title") or ""
    vendor = node.get("vendor") or ""
    product_type = node.get("productType") or ""
    tags = [str(t) for t in (node.get("tags") or [])]
    description_html = node.get("descriptionHtml") or ""

    variant = _first_node(node.get("variants"))
    money = variant.get("price") or {}
    price = _to_price(money.get("amount"))
    currency = money.get("currencyCode") or DEFAULT_CURRENCY_CODE

    image = _first_node(node.get("images")).get("url") or (
        f"https://{shop_domain}/cdn/shop/products/{handle}.jpg"
    )

    notes = extract_notes(description_html)
    gender_text = " ".join(
        tags
        + [
            title,
            vendor,
            product_type,
            " ".join(notes["top"]),
            " ".join(notes["heart"]),
            " ".join(notes["base"]),
            basic_clean(description_html),
        ]
    )

    return CatalogItem(
        id=str(node.get("id") or ""),
        handle=handle,
        title=title,
        brand=vendor,
        gender=infer_gender(gender_text),
        notes_top=notes["top"],
        notes_heart=notes["heart"],
        notes_base=notes["base"],
        tags=tags,
        product_type=product_type,
        price=price,
        currency=currency,
        price_band=price_band(price),
        image=image,
        url=f"https://{shop_domain}/products/{handle}",
        variant_id=str(variant.get("id") or ""),
    )


@dataclass(frozen=True)
class CatalogSnapshot:
    fetched_at: float = 0.0
    items: Tuple[CatalogItem, ...] = field(default_factory=tuple)


class CatalogLoader:
    """
    Owns the catalog cache for one service instance.

    ``load()`` returns the cached items while they are younger than the
    TTL, otherwise it fetches every page again.  Concurrent callers that
    find the cache stale share a single refresh.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[StorefrontClient] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings
        self.client = client or StorefrontClient(settings)
        self._clock = clock
        self._snapshot = CatalogSnapshot()
        self._refresh_lock = asyncio.Lock()

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def _is_fresh(self, now: float) -> bool:
        snap = self._snapshot
        return bool(snap.items) and (now - snap.fetched_at) < self.settings.cache_ttl_seconds

    async def load(self) -> List[CatalogItem]:
        if self._is_fresh(self._clock()):
            logger.debug("Catalog cache hit ({} items)", len(self._snapshot.items))
            return list(self._snapshot.items)

        async with self._refresh_lock:
            # Another task may have refreshed while we waited.
            now = self._clock()
            if self._is_fresh(now):
                return list(self._snapshot.items)
            items = await self.fetch_all()
            self._snapshot = CatalogSnapshot(fetched_at=now, items=tuple(items))
            return list(items)

    async def fetch_all(self) -> List[CatalogItem]:
        """
        Page through all non-archived products, in the order received.

        The loop ends when a page reports ``hasNextPage`` false.  The
        cursor of the last edge of each page is passed to the next
        request.
        """
        items: List[CatalogItem] = []
        cursor: Optional[str] = None
        page = 0

        while True:
            page += 1
            logger.info("Fetching products page {} (after={})", page, cursor)
            data = await self.client.execute(
                PRODUCTS_QUERY,
                {"cursor": cursor, "first": PRODUCTS_PAGE_SIZE, "filter": PRODUCTS_SEARCH_FILTER},
            )
            products = data.get("products") or {}
            edges = products.get("edges") or []
            for edge in edges:
                items.append(normalize_product(edge.get("node") or {}, self.settings.shop_domain))
                cursor = edge.get("cursor")

            has_next = bool((products.get("pageInfo") or {}).get("hasNextPage"))
            if not has_next:
                break
            if not edges:
                logger.warning("Page {} reports more products but has no edges", page)
                raise StorefrontError("Pagination stalled: empty page with hasNextPage")

        logger.info("Catalog loaded: {} items over {} page(s)", len(items), page)
        return items
