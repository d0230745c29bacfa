"""
Compressor Service - Single Responsibility: shrink selfies before upload.

Downscales so the longest side fits ``max_width_or_height`` and re-encodes as
JPEG, lowering quality until the result fits ``max_size_mb``.
"""
import asyncio
import io
import logging
from typing import Optional

from PIL import Image, ImageOps

from ..models import ImageFile, PluginConfig

logger = logging.getLogger(__name__)

INITIAL_QUALITY = 90
MIN_QUALITY = 40
QUALITY_STEP = 10


class ImageCompressor:
    """
    Service for compressing images with Pillow.

    Implements ICompressor protocol. Encoding runs in a worker thread so the
    event loop keeps ticking the progress timer.
    """

    def __init__(self, config: Optional[PluginConfig] = None):
        self._config = config or PluginConfig()

    async def compress(self, image: ImageFile, name: str) -> ImageFile:
        """
        Compress ``image`` and name the result ``name``.

        Raises whatever Pillow raises for unreadable input; callers decide
        whether to fall back to the original.
        """
        data = await asyncio.to_thread(self._compress_bytes, image.data)
        compressed = ImageFile(name=name, mime_type="image/jpeg", data=data)
        logger.info("Original file size: %.3f MB", image.size_mb)
        logger.info("Compressed file size: %.3f MB", compressed.size_mb)
        return compressed

    def _compress_bytes(self, data: bytes) -> bytes:
        max_side = self._config.max_width_or_height
        max_bytes = self._config.max_size_bytes

        with Image.open(io.BytesIO(data)) as img:
            img = ImageOps.exif_transpose(img)
            if img.mode != "RGB":
                img = img.convert("RGB")
            img.thumbnail((max_side, max_side), Image.Resampling.LANCZOS)

            quality = INITIAL_QUALITY
            while True:
                buffer = io.BytesIO()
                img.save(buffer, format="JPEG", quality=quality, optimize=True)
                encoded = buffer.getvalue()
                if len(encoded) <= max_bytes or quality <= MIN_QUALITY:
                    return encoded
                logger.debug("JPEG at quality %d is %d bytes, retrying", quality, len(encoded))
                quality -= QUALITY_STEP
