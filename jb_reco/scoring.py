from __future__ import annotations

"""
Affinity scoring of catalog items against questionnaire answers.

The score is additive over independent signals.  A signal contributes
its weight from :data:`~jb_reco.config.SIGNAL_WEIGHTS` only when the
matching answer field is set *and* the item matches the pattern the
answer maps to.  An unset or unknown answer never changes the score.
All patterns are case-insensitive searches over
:attr:`CatalogItem.profile_text`.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .config import (
    BUDGET_BANDS,
    DEFAULT_CURRENCY_SYMBOL,
    FORMAT_EDP_ANSWER,
    FORMAT_EDP_PATTERN,
    FORMAT_OIL_PATTERN,
    FORMAT_OIL_PREFIX,
    GENDER_ANSWERS,
    INTENSITY_PATTERNS,
    OCCASION_PATTERNS,
    PROFILE_PATTERNS,
    RESULT_LIMIT,
    SENSITIVITY_PATTERN,
    SENSITIVITY_YES,
    SIGNAL_WEIGHTS,
    Answers,
    CatalogItem,
    RecommendResponse,
)
from .mapping import map_items_to_response


def _compile(table: Dict[str, str]) -> Dict[str, re.Pattern[str]]:
    return {k: re.compile(v, re.IGNORECASE) for k, v in table.items()}


_PROFILE_RES = _compile(PROFILE_PATTERNS)
_INTENSITY_RES = _compile(INTENSITY_PATTERNS)
_OIL_RE = re.compile(FORMAT_OIL_PATTERN, re.IGNORECASE)
_EDP_RE = re.compile(FORMAT_EDP_PATTERN, re.IGNORECASE)
_SENSITIVITY_RE = re.compile(SENSITIVITY_PATTERN, re.IGNORECASE)


def occasion_pattern(occasion: str) -> re.Pattern[str]:
    """Event and everyday answers map to keyword sets; anything else is matched literally."""
    for keyword, pattern in OCCASION_PATTERNS:
        if keyword in occasion:
            return re.compile(pattern, re.IGNORECASE)
    return re.compile(re.escape(occasion.lower()), re.IGNORECASE)


def score_product(item: CatalogItem, answers: Answers) -> int:
    text = item.profile_text
    s = 0

    if answers.gender and GENDER_ANSWERS.get(answers.gender) == item.gender:
        s += SIGNAL_WEIGHTS["gender"]

    if answers.profile:
        pattern = _PROFILE_RES.get(answers.profile)
        if pattern is not None and pattern.search(text):
            s += SIGNAL_WEIGHTS["profile"]

    if answers.intensity:
        pattern = _INTENSITY_RES.get(answers.intensity)
        if pattern is not None and pattern.search(text):
            s += SIGNAL_WEIGHTS["intensity"]

    if answers.occasion and occasion_pattern(answers.occasion).search(text):
        s += SIGNAL_WEIGHTS["occasion"]

    if answers.budget and BUDGET_BANDS.get(answers.budget) == item.price_band:
        s += SIGNAL_WEIGHTS["budget"]

    if answers.format:
        if answers.format.startswith(FORMAT_OIL_PREFIX) and _OIL_RE.search(text):
            s += SIGNAL_WEIGHTS["format_oil"]
        if answers.format == FORMAT_EDP_ANSWER and _EDP_RE.search(text):
            s += SIGNAL_WEIGHTS["format_edp"]

    if answers.sensitivity == SENSITIVITY_YES and _SENSITIVITY_RE.search(text):
        s += SIGNAL_WEIGHTS["sensitivity"]

    return s


@dataclass
class ScoredItem:
    item: CatalogItem
    score: int


def rank_items(
    items: Sequence[CatalogItem],
    answers: Answers,
    limit: Optional[int] = RESULT_LIMIT,
) -> List[ScoredItem]:
    """
    Score every item and sort by descending score.

    The sort is stable, so equal scores keep catalog order.  Nothing is
    filtered out: zero or negative scores still fill the list when the
    catalog is small.
    """
    scored = [ScoredItem(item=it, score=score_product(it, answers)) for it in items]
    ranked = sorted(scored, key=lambda c: c.score, reverse=True)
    if limit is not None:
        ranked = ranked[: max(0, limit)]
    return ranked


def recommend(
    items: Sequence[CatalogItem],
    answers: Answers,
    limit: int = RESULT_LIMIT,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> RecommendResponse:
    """Rank ``items`` for ``answers`` and return the top ``limit`` as view models."""
    ranked = rank_items(items, answers, limit=limit)
    return map_items_to_response([c.item for c in ranked], currency_symbol)
