"""Pytest fixtures: settings, raw storefront products and a fake GraphQL transport."""

import json

import httpx
import pytest

from jb_reco.config import Settings

SHOP = "shop.example.com"


def product_node(
    handle,
    title,
    *,
    vendor="",
    description="",
    tags=(),
    product_type="",
    price="30.00",
    currency="EUR",
    image=None,
    variant_id=None,
):
    node = {
        "id": f"gid://shopify/Product/{handle}",
        "handle": handle,
        "title": title,
        "vendor": vendor,
        "productType": product_type,
        "tags": list(tags),
        "descriptionHtml": description,
        "images": {"edges": [{"node": {"url": image}}] if image else []},
        "variants": {"edges": []},
    }
    if price is not None:
        node["variants"]["edges"].append(
            {
                "node": {
                    "id": variant_id or f"gid://shopify/ProductVariant/{handle}",
                    "price": {"amount": price, "currencyCode": currency},
                }
            }
        )
    return node


def products_page(nodes, has_next, start=0):
    return {
        "data": {
            "products": {
                "pageInfo": {"hasNextPage": has_next},
                "edges": [
                    {"cursor": f"cursor-{start + i}", "node": n} for i, n in enumerate(nodes)
                ],
            }
        }
    }


class FakeStorefront:
    """Serves queued GraphQL responses and records every request body."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(
            {
                "url": str(request.url),
                "headers": dict(request.headers),
                "body": json.loads(request.content),
            }
        )
        if not self.responses:
            return httpx.Response(500, json={"errors": ["no more responses queued"]})
        resp = self.responses.pop(0)
        if isinstance(resp, httpx.Response):
            return resp
        return httpx.Response(200, json=resp)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings():
    return Settings(shop_domain=SHOP, storefront_token="token-123")


@pytest.fixture
def three_products():
    return [
        product_node("rose-femme", "Rose Femme", vendor="Maison Alba", price="30.00"),
        product_node("cuir-homme", "Cuir Homme", vendor="Maison Alba", price="80.00"),
        product_node("jasmin", "Jasmin pour femme", vendor="Maison Alba", price="75.00"),
    ]
