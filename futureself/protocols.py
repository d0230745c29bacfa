"""
Protocols (Interfaces) for Dependency Inversion.

Each external collaborator of the orchestrator is reached through one of
these small interfaces so tests can substitute in-memory fakes.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Protocol, runtime_checkable

from .models import (
    AssetUploadRequest,
    GroupElement,
    ImageFile,
    PageDimensions,
    PollResult,
)

TransferCallback = Callable[[int, int], None]


@runtime_checkable
class ICompressor(Protocol):
    """Interface for image compression."""

    async def compress(self, image: ImageFile, name: str) -> ImageFile:
        """Return a compressed copy of ``image`` named ``name``."""
        ...


@runtime_checkable
class IURLIssuer(Protocol):
    """Interface for the signed-URL issuing endpoint."""

    async def issue(self, object_name: str, content_type: str, expiration: int) -> Optional[str]:
        """Return a signed upload URL, or None if none could be obtained."""
        ...


@runtime_checkable
class IObjectStore(Protocol):
    """Interface for direct uploads to object storage."""

    async def put(
        self,
        url: str,
        image: ImageFile,
        progress_callback: Optional[TransferCallback] = None,
    ) -> bool:
        """PUT the image to a signed URL. True on HTTP 200."""
        ...


@runtime_checkable
class IResultPoller(Protocol):
    """Interface for the result-availability check."""

    async def check(self, object_name: str) -> PollResult:
        ...


@runtime_checkable
class IKeyValueStore(Protocol):
    """Interface for persisted panel state."""

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def has(self, key: str) -> bool:
        ...


class IDesignHost(ABC):
    """Interface for the design host SDK (canvas, assets, fonts)."""

    @abstractmethod
    async def upload_asset(self, request: AssetUploadRequest) -> Optional[str]:
        """Upload an asset and return its opaque reference."""
        pass

    @abstractmethod
    async def add_element_at_point(self, element: GroupElement) -> None:
        pass

    @abstractmethod
    async def get_page_dimensions(self) -> Optional[PageDimensions]:
        """Current page size, or None when the design has no dimensions."""
        pass

    @abstractmethod
    async def set_page_background(self, asset_ref: str) -> None:
        pass

    @abstractmethod
    async def find_fonts(self) -> List[Any]:
        pass

    @abstractmethod
    async def request_font_selection(self) -> Any:
        pass
