"""HTTP adapter for the processed-result check."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..models import PluginConfig, PollResult

logger = logging.getLogger(__name__)

PENDING_STATUSES = {202, 404}


class HTTPResultPoller:
    """
    Asks whether the composited image for an object is ready.

    Implements IResultPoller protocol. The endpoint answers
    ``GET <result_url>?object_name=<name>`` with
    ``{"ready": true, "url": "...", "mime_type": "image/jpeg"}`` once the
    artifact exists; ``{"ready": false}``, 202 or 404 mean "not yet".
    Other HTTP errors raise ``httpx.HTTPStatusError``.
    """

    def __init__(self, client: httpx.AsyncClient, config: Optional[PluginConfig] = None):
        self._client = client
        self._config = config or PluginConfig()

    async def check(self, object_name: str) -> PollResult:
        response = await self._client.get(
            self._config.result_url,
            params={"object_name": object_name},
        )
        if response.status_code in PENDING_STATUSES:
            return PollResult.pending()
        response.raise_for_status()

        body = response.json()
        if not isinstance(body, dict) or not body.get("ready"):
            return PollResult.pending()

        url = body.get("url")
        if not isinstance(url, str) or not url:
            logger.warning("Result for %s reported ready without a url", object_name)
            return PollResult.pending()

        logger.info("Result for %s is ready: %s", object_name, url)
        return PollResult.available(url, body.get("mime_type"))
