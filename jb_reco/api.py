from __future__ import annotations

"""
FastAPI application for the JB recommender.

- ``GET /apps/jb-reco?q=<json>`` scores the catalog against the answers
  in ``q`` and returns the top matches
- ``GET /debug`` summarizes the cached catalog
- ``GET /`` is a plain-text liveness probe

A malformed or missing ``q`` means "no preference".  Any failure while
loading or scoring answers ``500 {"error": "server_error"}``.
"""

from typing import Optional

import httpx
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

from .catalog import CatalogLoader
from .config import (
    DEBUG_SAMPLE_SIZE,
    RESULT_LIMIT,
    Answers,
    DebugResponse,
    RecommendResponse,
    Settings,
    load_settings,
)
from .scoring import recommend
from .storefront import StorefrontClient


def _server_error(detail: Optional[str] = None) -> JSONResponse:
    body = {"error": "server_error"}
    if detail is not None:
        body["detail"] = detail
    return JSONResponse(status_code=500, content=body)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application.  The catalog cache lives on
    ``app.state.catalog_loader`` and is shared by every request.
    """
    settings = settings or load_settings()
    if not settings.is_configured:
        logger.warning("Missing SHOP_DOMAIN or STOREFRONT_TOKEN; catalog requests will fail.")

    app = FastAPI(title="JB Reco")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.catalog_loader = CatalogLoader(
        settings, client=StorefrontClient(settings, transport=transport)
    )

    @app.get("/", response_class=PlainTextResponse)
    def health() -> str:
        return "OK"

    @app.get("/apps/jb-reco", response_model=RecommendResponse)
    async def recommend_route(request: Request, q: Optional[str] = Query(default=None)):
        answers = Answers.from_query(q)
        loader: CatalogLoader = request.app.state.catalog_loader
        try:
            catalog = await loader.load()
            return recommend(
                catalog,
                answers,
                limit=RESULT_LIMIT,
                currency_symbol=settings.currency_symbol,
            )
        except Exception:
            logger.exception("Recommendation request failed")
            return _server_error()

    @app.get("/debug", response_model=DebugResponse)
    async def debug_route(request: Request):
        loader: CatalogLoader = request.app.state.catalog_loader
        try:
            catalog = await loader.load()
            return DebugResponse(count=len(catalog), sample=catalog[:DEBUG_SAMPLE_SIZE])
        except Exception as e:
            logger.exception("Debug request failed")
            return _server_error(str(e))

    return app
