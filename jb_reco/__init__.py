"""
Top-level package for the JB fragrance recommender.

This package contains modules for fetching the boutique's product
catalog from the storefront GraphQL API, normalizing raw products
into catalog items (notes, gender, price band), scoring those items
against a shopper's questionnaire answers and serving the top
matches over a small HTTP endpoint.  There are no side-effects on
import; the FastAPI application is built by :func:`jb_reco.api.create_app`.
"""
from __future__ import annotations

__version__ = "1.0.0"
