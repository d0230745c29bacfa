"""HTTP adapter for the signed-URL issuing endpoint."""
from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from ..models import PluginConfig

logger = logging.getLogger(__name__)


class SignedURLIssuer:
    """
    Requests pre-signed upload URLs.

    Implements IURLIssuer protocol. Any failure is logged and reported as
    ``None``; the endpoint is called exactly once per request.
    """

    def __init__(self, client: httpx.AsyncClient, config: Optional[PluginConfig] = None):
        self._client = client
        self._config = config or PluginConfig()

    def endpoint(self) -> str:
        base = self._config.issuer_url.rstrip("/")
        bucket = quote(self._config.bucket_name.strip("/"), safe="")
        return f"{base}/{bucket}" if bucket else base

    async def issue(self, object_name: str, content_type: str, expiration: int) -> Optional[str]:
        params = {
            "object_name": object_name,
            "content_type": content_type,
            "expiration": str(expiration),
        }
        try:
            response = await self._client.put(self.endpoint(), params=params, json={})
        except httpx.HTTPError as exc:
            logger.error("Error sending request: %s", exc)
            return None

        if response.status_code >= 400:
            logger.error(
                "URL issuer returned %s for %s: %s",
                response.status_code,
                object_name,
                response.text,
            )
            return None

        try:
            body = response.json()
        except ValueError:
            logger.error("URL issuer returned a non-JSON body for %s", object_name)
            return None

        url = body.get("url") if isinstance(body, dict) else None
        if not isinstance(url, str) or not url.strip():
            logger.error("URL issuer response has no usable url: %r", body)
            return None

        logger.debug("Issued upload URL for %s", object_name)
        return url
