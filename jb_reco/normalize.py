from __future__ import annotations

"""
Text normalization utilities used across the JB recommender.

These helpers perform basic cleaning of storefront descriptions (HTML
stripping, unicode normalization, whitespace collapsing), diacritic
folding for gender detection, extraction of the olfactive notes
pyramid from free text and price banding.  Keeping normalization logic
centralized here ensures catalog items are derived consistently.
"""

import re
import unicodedata
from typing import Dict, List

from bs4 import BeautifulSoup

from .config import (
    FEMININE_MARKERS,
    GENDER_FEMME,
    GENDER_HOMME,
    GENDER_UNISEX,
    MASCULINE_MARKERS,
    PRICE_BAND_HIGH,
    PRICE_BAND_LOW,
    PRICE_BAND_MID,
    PRICE_BANDS,
)


# ---------------------------
# Basic helpers
# ---------------------------

BLOCK_TAGS = ["p", "div", "li", "br", "tr", "h1", "h2", "h3", "h4", "h5", "h6"]

def normalize_whitespace(text: str) -> str:
    """
    Collapse all whitespace runs into a single space and strip edges.
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def strip_html(raw: str, keep_lines: bool = False) -> str:
    """
    Strip HTML tags using BeautifulSoup and clean up whitespace.

    With ``keep_lines`` block boundaries survive as newlines so that
    line-oriented parsing (see :func:`extract_notes`) does not run one
    paragraph into the next.  Otherwise everything is collapsed onto a
    single line.
    """
    if not raw:
        return ""
    if "<" not in raw:
        text = raw
    else:
        soup = BeautifulSoup(raw, "lxml")
        if keep_lines:
            for tag in soup.find_all(BLOCK_TAGS):
                tag.insert_after("\n")
        text = soup.get_text(" ")
    if keep_lines:
        lines = (normalize_whitespace(line) for line in text.splitlines())
        return "\n".join(line for line in lines if line)
    text = normalize_whitespace(text)
    # Remove spaces before common punctuation marks
    return re.sub(r"\s+([.,!?;:])", r"\1", text)


def normalize_unicode(text: str) -> str:
    if not text:
        return ""
    return unicodedata.normalize("NFC", text)


def fold_diacritics(text: str) -> str:
    """
    Lowercase and strip accents (``"Épicé"`` -> ``"epice"``).  Used
    only for gender detection; scoring patterns see the original text.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def basic_clean(text: str) -> str:
    """
    End-to-end cleaning of a description: strip HTML, normalize unicode
    and collapse whitespace.
    """
    if text is None:
        return ""
    text = strip_html(str(text))
    text = normalize_unicode(text)
    return normalize_whitespace(text)


# ---------------------------
# Notes pyramid
# ---------------------------

NOTE_LABELS: Dict[str, str] = {
    "top": r"(?:Notes? de t(?:ê|e)te|Top Notes?)",
    "heart": r"(?:Notes? de c(?:œ|oe)ur|Heart Notes?)",
    "base": r"(?:Notes? de fond|Base Notes?)",
}

NOTE_SPLIT_RE = re.compile(r",|;|/|·|•")

_NOTE_RES = {
    band: re.compile(label + r"\s*:\s*([^.\n]+)", re.IGNORECASE)
    for band, label in NOTE_LABELS.items()
}


def _grab_notes(text: str, band: str) -> List[str]:
    m = _NOTE_RES[band].search(text)
    if not m:
        return []
    return [part.strip() for part in NOTE_SPLIT_RE.split(m.group(1)) if part.strip()]


def extract_notes(html_or_text: str) -> Dict[str, List[str]]:
    """
    Parse the top / heart / base notes out of a product description.

    Labels are matched case-insensitively in French or English
    (``Notes de tête``, ``Top Notes`` ...).  The notes run from the
    label's colon up to the next full stop or line break and are split
    on ``,`` ``;`` ``/`` ``·`` ``•``.  A missing label yields an empty
    list for that band.
    """
    text = normalize_unicode(strip_html(html_or_text or "", keep_lines=True))
    return {band: _grab_notes(text, band) for band in NOTE_LABELS}


# ---------------------------
# Derived attributes
# ---------------------------

_FEMININE_RE = re.compile(FEMININE_MARKERS)
_MASCULINE_RE = re.compile(MASCULINE_MARKERS)


def infer_gender(text: str) -> str:
    """
    Guess the target gender of a product from its text.

    Feminine markers are tested first, then masculine ones.  A masculine
    match turns a feminine guess into ``unisex``; a masculine-only match
    stays ``homme``.  No match at all means ``unisex``.
    """
    folded = fold_diacritics(text)
    gender = GENDER_UNISEX
    if _FEMININE_RE.search(folded):
        gender = GENDER_FEMME
    if _MASCULINE_RE.search(folded):
        gender = GENDER_UNISEX if gender == GENDER_FEMME else GENDER_HOMME
    return gender


def price_band(amount: float) -> str:
    if amount < PRICE_BAND_LOW:
        return PRICE_BANDS[0]
    if amount <= PRICE_BAND_MID:
        return PRICE_BANDS[1]
    if amount <= PRICE_BAND_HIGH:
        return PRICE_BANDS[2]
    return PRICE_BANDS[3]
