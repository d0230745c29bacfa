"""Canvas placement of finished results and the one-time page background."""
import logging
from typing import Optional

from ..errors import HostError, UnsupportedImageError, describe_host_error
from ..models import (
    AssetUploadRequest,
    GroupElement,
    ImageElement,
    PageDimensions,
    PluginConfig,
    PollResult,
    TextElement,
)
from ..protocols import IDesignHost, IKeyValueStore

logger = logging.getLogger(__name__)

VALID_RESULT_MIME_TYPES = ("image/png", "image/jpeg", "image/webp")

IMAGE_WIDTH = 500
IMAGE_HEIGHT = 500
GAP_BETWEEN_IMAGE_AND_TEXT = 60
GROUP_OFFSET = 30
TEXT_BOX_OVERHANG = 60


def _log_host_error(action: str, error: HostError) -> None:
    logger.error("%s failed [%s]: %s", action, error.code, describe_host_error(error))


def build_result_group(
    page: PageDimensions,
    result_ref: str,
    text_box_ref: str,
    caption: str,
) -> GroupElement:
    """
    Lay out the result image above a text box with a caption on top of it.

    The result image is centered horizontally (shifted by the group offset);
    the text box spans the page width plus an overhang.
    """
    text_width = page.width
    group_left = (page.width - IMAGE_WIDTH) / 2 + GROUP_OFFSET
    return GroupElement(children=[
        ImageElement(
            ref=text_box_ref,
            width=text_width + TEXT_BOX_OVERHANG,
            height="auto",
            top=IMAGE_HEIGHT + GAP_BETWEEN_IMAGE_AND_TEXT / 2,
            left=0,
        ),
        ImageElement(
            ref=result_ref,
            width=IMAGE_WIDTH,
            height=IMAGE_HEIGHT,
            top=0,
            left=group_left,
        ),
        TextElement(
            text=caption,
            width=text_width,
            top=IMAGE_HEIGHT + GAP_BETWEEN_IMAGE_AND_TEXT,
            left=GROUP_OFFSET,
        ),
    ])


class CanvasComposer:
    """Places a finished "future self" image on the current page."""

    def __init__(self, host: IDesignHost, config: Optional[PluginConfig] = None):
        self._host = host
        self._config = config or PluginConfig()

    def caption_for(self, profession: str) -> str:
        return self._config.caption_template.format(profession=profession.lower())

    async def place_result(self, result: PollResult, profession: str) -> bool:
        """
        Upload the result and text box, then add them as one group.

        Returns:
            True if the group was added; False when the page has no
            dimensions or the host refused an operation (logged)

        Raises:
            UnsupportedImageError: result MIME type is not png/jpeg/webp
        """
        if not result.ready or not result.url:
            raise ValueError("Cannot place a result that is not ready")

        mime_type = result.mime_type or "image/jpeg"
        if mime_type not in VALID_RESULT_MIME_TYPES:
            raise UnsupportedImageError(f"Unsupported image type: {mime_type}")

        try:
            result_ref = await self._host.upload_asset(AssetUploadRequest(
                mime_type=mime_type,
                url=result.url,
                thumbnail_url=result.url,
            ))
            text_box_ref = await self._host.upload_asset(AssetUploadRequest(
                mime_type="image/png",
                url=self._config.text_box_url,
                thumbnail_url=self._config.text_box_url,
            ))
            if not result_ref or not text_box_ref:
                raise HostError.from_code(None, f"Asset upload returned no ref (result={result_ref!r})")

            page = await self._host.get_page_dimensions()
            if page is None:
                logger.warning("The current design does not have dimensions")
                return False

            group = build_result_group(page, result_ref, text_box_ref, self.caption_for(profession))
            await self._host.add_element_at_point(group)
        except HostError as e:
            _log_host_error("Placing result", e)
            return False

        logger.info("Placed result for %s on a %sx%s page", profession, page.width, page.height)
        return True


class BackgroundInitializer:
    """Sets the page background once; a persisted flag remembers it."""

    def __init__(
        self,
        host: IDesignHost,
        store: IKeyValueStore,
        config: Optional[PluginConfig] = None,
    ):
        self._host = host
        self._store = store
        self._config = config or PluginConfig()

    @property
    def is_set(self) -> bool:
        return self._store.get(self._config.background_flag_key) == "true"

    async def ensure_background(self) -> bool:
        """
        Set the background unless the flag says it already is.

        Returns:
            True if the background was set by this call
        """
        if self.is_set:
            logger.debug("Background already set, skipping")
            return False

        url = self._config.background_url
        try:
            fonts = await self._host.find_fonts()
            logger.info("Host offers %d fonts", len(fonts))
            selection = await self._host.request_font_selection()
            logger.info("Font selection: %r", selection)

            ref = await self._host.upload_asset(AssetUploadRequest(
                mime_type="image/png",
                url=url,
                thumbnail_url=url,
            ))
            if not ref:
                raise HostError.from_code(None, f"Background upload returned no ref: {ref!r}")

            await self._host.set_page_background(ref)
        except HostError as e:
            _log_host_error("Setting background", e)
            return False

        self._store.set(self._config.background_flag_key, "true")
        logger.info("Page background set from %s", url)
        return True
