"""
Configuration for the JB fragrance recommender.
"""

from __future__ import annotations

import json
import os
from typing import Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

# Storefront API
DEFAULT_API_VERSION = "2024-07"
STOREFRONT_TOKEN_HEADER = "X-Shopify-Storefront-Access-Token"
ADMIN_TOKEN_HEADER = "X-Shopify-Access-Token"
PRODUCTS_PAGE_SIZE = 100
PRODUCTS_SEARCH_FILTER = "-status:ARCHIVED"
DEFAULT_CURRENCY_CODE = "EUR"
DEFAULT_CURRENCY_SYMBOL = "€"

# Catalog cache
CATALOG_TTL_SECONDS = 15 * 60

# Result policy
RESULT_LIMIT = 5
DEBUG_SAMPLE_SIZE = 3

# HTTP hardening
HTTP_CONNECT_TIMEOUT = 5.0
HTTP_READ_TIMEOUT = 30.0
HTTP_USER_AGENT = "jb-reco/1.0"

# Price bands (upper bounds are inclusive, except the first one)
PRICE_BAND_LOW = 25.0
PRICE_BAND_MID = 40.0
PRICE_BAND_HIGH = 60.0
PRICE_BANDS: List[str] = ["<25", "25-40", "40-60", "+60"]

# Gender
GENDER_FEMME = "femme"
GENDER_HOMME = "homme"
GENDER_UNISEX = "unisex"
FEMININE_MARKERS = r"femme|women|ladies"
MASCULINE_MARKERS = r"homme|men|gent"

# ---- Scoring tables ----
# Each answer value maps to a case-insensitive pattern tested against the
# item's profile text.  Unknown answer values contribute nothing.

SIGNAL_WEIGHTS: Dict[str, int] = {
    "gender": 2,
    "profile": 3,
    "intensity": 1,
    "occasion": 1,
    "budget": 2,
    "format_oil": 2,
    "format_edp": 1,
    "sensitivity": -1,
}

GENDER_ANSWERS: Dict[str, str] = {
    "Mixte": GENDER_UNISEX,
    "Femme": GENDER_FEMME,
    "Homme": GENDER_HOMME,
}

PROFILE_PATTERNS: Dict[str, str] = {
    "Floral": r"floral",
    "Fruité": r"fruit",
    "Gourmand": r"gourmand",
    "Boisé/Ambré": r"bois|oud|ambr",
    "Musqué": r"musc",
    "Frais/Agrumes": r"frais|agrum|citron|bergamote",
    "Épicé": r"epic|poivr|safran|cardamome",
}

INTENSITY_PATTERNS: Dict[str, str] = {
    "Douce": r"doux|léger|subtil",
    "Modérée": r"mod(é|e)r(é|e)",
    "Marquée": r"fort|intense|puissant",
}

# Occasion answers are matched by keyword; the first keyword found in the
# answer selects the pattern, otherwise the answer itself is used literally.
OCCASION_PATTERNS: List[tuple[str, str]] = [
    ("Mariage", r"mariage|ev(è|e)nement"),
    ("Tous", r"quotidien|tous les jours|daily"),
]

BUDGET_BANDS: Dict[str, str] = {
    "<25€": "<25",
    "25–40€": "25-40",
    "40–60€": "40-60",
    "+60€": "+60",
    # ASCII hyphen spellings
    "25-40€": "25-40",
    "40-60€": "40-60",
}

FORMAT_OIL_PREFIX = "Huile"
FORMAT_OIL_PATTERN = r"huile|musc"
FORMAT_EDP_ANSWER = "Eau de parfum"
FORMAT_EDP_PATTERN = r"eau de parfum|edp"

SENSITIVITY_YES = "Oui"
SENSITIVITY_PATTERN = r"fort|intense|puissant"


# ---- Settings ----

class Settings(BaseModel):
    """Read-only runtime settings, loaded once at startup."""

    model_config = ConfigDict(frozen=True)

    shop_domain: str = ""
    storefront_token: str = ""
    admin_token: str = ""
    api_version: str = DEFAULT_API_VERSION
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    port: int = Field(default=3000, ge=1, le=65535)
    cache_ttl_seconds: float = Field(default=CATALOG_TTL_SECONDS, ge=0)

    @property
    def is_configured(self) -> bool:
        return bool(self.shop_domain and (self.storefront_token or self.admin_token))

    @property
    def graphql_url(self) -> str:
        return f"https://{self.shop_domain}/api/{self.api_version}/graphql.json"


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Build :class:`Settings` from a ``.env`` file (when present) and the
    process environment.  Values already set in the environment win.
    """
    load_dotenv(env_file)
    return Settings(
        shop_domain=os.getenv("SHOP_DOMAIN", "").strip(),
        storefront_token=os.getenv("STOREFRONT_TOKEN", "").strip(),
        admin_token=os.getenv("ADMIN_TOKEN", "").strip(),
        api_version=os.getenv("SHOPIFY_API_VERSION", DEFAULT_API_VERSION),
        currency_symbol=os.getenv("CURRENCY_SYMBOL", DEFAULT_CURRENCY_SYMBOL),
        port=int(os.getenv("PORT", "3000")),
        cache_ttl_seconds=float(os.getenv("CATALOG_TTL_SECONDS", str(CATALOG_TTL_SECONDS))),
    )


# ---- Pydantic schemas ----

class CatalogItem(BaseModel):
    """One storefront product after normalization."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    handle: str
    title: str = ""
    brand: str = ""
    gender: str = GENDER_UNISEX
    family: str = ""
    profile: List[str] = Field(default_factory=list)
    notes_top: List[str] = Field(default_factory=list, alias="notesTop")
    notes_heart: List[str] = Field(default_factory=list, alias="notesHeart")
    notes_base: List[str] = Field(default_factory=list, alias="notesBase")
    intensity: str = ""
    occasion: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    product_type: str = Field(default="", alias="productType")
    price: float = Field(default=0.0, ge=0)
    currency: str = DEFAULT_CURRENCY_CODE
    price_band: str = Field(alias="priceBand")
    image: str
    url: str
    variant_id: str = Field(default="", alias="variantId")

    @property
    def profile_text(self) -> str:
        """Text the scoring patterns are matched against (diacritics kept)."""
        return " ".join(
            [
                self.title,
                self.brand,
                self.gender,
                " ".join(self.notes_top),
                " ".join(self.notes_heart),
                " ".join(self.notes_base),
            ]
        )


class Answers(BaseModel):
    """Questionnaire answers.  Every field is optional; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    gender: Optional[str] = None
    profile: Optional[str] = None
    intensity: Optional[str] = None
    occasion: Optional[str] = None
    budget: Optional[str] = None
    format: Optional[str] = None
    sensitivity: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _drop_non_strings(cls, value, info: ValidationInfo):
        # A wrongly typed answer is treated as unanswered; the others still count.
        if info.field_name == "occasion" and isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value if v is not None)
        return value if isinstance(value, str) else None

    @classmethod
    def from_query(cls, raw: Optional[str]) -> "Answers":
        """
        Parse the ``q`` query parameter.  Missing, malformed or
        non-object payloads mean "no preference" and yield empty answers.
        """
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
        except ValueError:
            return cls()
        if not isinstance(data, dict):
            return cls()
        try:
            return cls.model_validate(data)
        except ValidationError:
            return cls()


class RecommendedItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    url: str
    image: str
    price: str
    badge: str
    variant_id: str = Field(default="", alias="variantId")


class RecommendResponse(BaseModel):
    items: List[RecommendedItem]


class DebugResponse(BaseModel):
    count: int = Field(ge=0)
    sample: List[CatalogItem]
