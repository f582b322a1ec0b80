from __future__ import annotations

"""
Async client for the storefront GraphQL API.

A single :class:`StorefrontClient` wraps the versioned GraphQL
endpoint of the shop.  Every call posts ``{query, variables}`` with the
access-token header(s) and returns the ``data`` object.  Anything that
is not a clean GraphQL answer (transport error, HTTP status >= 400,
a body that is not JSON, an ``errors`` array) raises
:class:`StorefrontError`; there are no retries.
"""

from typing import Any, Dict, Optional

import httpx
from loguru import logger

from .config import (
    ADMIN_TOKEN_HEADER,
    HTTP_CONNECT_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_USER_AGENT,
    STOREFRONT_TOKEN_HEADER,
    Settings,
)


class StorefrontError(RuntimeError):
    """The storefront API could not be queried or answered with errors."""


class StorefrontClient:
    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": HTTP_USER_AGENT,
        }
        # Storefront tokens and admin tokens travel in different headers.
        if self.settings.storefront_token:
            headers[STOREFRONT_TOKEN_HEADER] = self.settings.storefront_token
        if self.settings.admin_token:
            headers[ADMIN_TOKEN_HEADER] = self.settings.admin_token
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers(),
            timeout=httpx.Timeout(HTTP_READ_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT),
            transport=self._transport,
            trust_env=False,
        )

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run one GraphQL operation and return its ``data`` payload.

        Raises
        ------
        StorefrontError
            When the shop is not configured, the request fails, the
            response status is >= 400 or the payload carries ``errors``.
        """
        if not self.settings.is_configured:
            raise StorefrontError("Storefront is not configured (SHOP_DOMAIN / STOREFRONT_TOKEN)")

        url = self.settings.graphql_url
        payload = {"query": query, "variables": variables or {}}
        try:
            async with self._client() as client:
                r = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise StorefrontError(f"Storefront request failed: {e}") from e

        if r.status_code >= 400:
            raise StorefrontError(f"HTTP {r.status_code} from {url}")

        try:
            body = r.json()
        except ValueError as e:
            raise StorefrontError(f"Invalid JSON from {url}") from e

        if not isinstance(body, dict):
            raise StorefrontError(f"Unexpected payload from {url}")
        if body.get("errors"):
            logger.warning("Storefront GraphQL errors: {}", body["errors"])
            raise StorefrontError(f"GraphQL errors: {body['errors']}")

        data = body.get("data")
        if not isinstance(data, dict):
            raise StorefrontError(f"No data in response from {url}")
        return data
