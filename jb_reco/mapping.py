from __future__ import annotations

"""
Mapping utilities for the JB recommender API.

This module converts catalog items into the compact view model
returned to the storefront widget.  All presentation logic (price
formatting, badge) is kept here so ``api.py`` stays simple.
"""

from typing import Iterable, List

from loguru import logger

from .config import DEFAULT_CURRENCY_SYMBOL, CatalogItem, RecommendedItem, RecommendResponse

BADGE_SEPARATOR = " • "


def format_price(amount: float, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    return f"{amount:.2f} {currency_symbol}"


def make_badge(item: CatalogItem) -> str:
    """Brand and gender joined by a bullet, skipping empty parts."""
    return BADGE_SEPARATOR.join(p for p in (item.brand, item.gender) if p)


def to_view_item(item: CatalogItem, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> RecommendedItem:
    return RecommendedItem(
        title=item.title,
        url=item.url,
        image=item.image,
        price=format_price(item.price, currency_symbol),
        badge=make_badge(item),
        variant_id=item.variant_id,
    )


def map_items_to_response(
    items: Iterable[CatalogItem],
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> RecommendResponse:
    """Convert ranked catalog items into a full :class:`RecommendResponse`."""
    out: List[RecommendedItem] = [to_view_item(it, currency_symbol) for it in items]
    logger.info("Mapped {} items into API schema", len(out))
    return RecommendResponse(items=out)
