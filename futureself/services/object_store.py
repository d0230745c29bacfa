"""
Object Store Service - Single Responsibility: PUT files to signed URLs.
"""
from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

import httpx

from ..models import ImageFile
from ..protocols import TransferCallback

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class SignedURLObjectStore:
    """
    Uploads directly to object storage through a pre-signed URL.

    Implements IObjectStore protocol.
    """

    def __init__(self, client: httpx.AsyncClient, chunk_size: int = CHUNK_SIZE):
        self._client = client
        self._chunk_size = chunk_size

    async def put(
        self,
        url: str,
        image: ImageFile,
        progress_callback: Optional[TransferCallback] = None,
    ) -> bool:
        """
        Upload ``image`` to ``url``.

        Args:
            url: Signed upload URL
            image: File to upload; its MIME type becomes the Content-Type
            progress_callback: Optional ``(sent, total)`` callback; when given
                the body is streamed in chunks

        Returns:
            True if storage answered HTTP 200
        """
        headers = {"Content-Type": image.mime_type}
        if progress_callback is not None:
            # Signed PUTs need an explicit length, not chunked encoding
            headers["Content-Length"] = str(image.size)
            content = self._stream(image, progress_callback)
        else:
            content = image.data

        try:
            response = await self._client.put(url, content=content, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Error uploading to storage: %s", exc)
            return False

        if response.status_code == 200:
            logger.info("Successfully uploaded %s to storage", image.name)
            return True

        logger.error("Error uploading to storage: HTTP %s %s", response.status_code, response.text)
        return False

    async def _stream(self, image: ImageFile, progress_callback: TransferCallback) -> AsyncIterator[bytes]:
        total = image.size
        sent = 0
        for offset in range(0, total, self._chunk_size):
            chunk = image.data[offset:offset + self._chunk_size]
            yield chunk
            sent += len(chunk)
            progress_callback(sent, total)
