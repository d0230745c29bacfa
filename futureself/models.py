"""
Models for futureself module.

Plain dataclasses shared by the orchestrator, its services and the canvas
composer.
"""
import mimetypes
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


class TaskState(Enum):
    """Lifecycle state of an upload task."""
    IDLE = "idle"
    COMPRESSING = "compressing"
    AWAITING_URL = "awaiting_url"
    UPLOADING = "uploading"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


ACTIVE_STATES = frozenset({
    TaskState.COMPRESSING,
    TaskState.AWAITING_URL,
    TaskState.UPLOADING,
    TaskState.POLLING,
})
TERMINAL_STATES = frozenset({
    TaskState.SUCCEEDED,
    TaskState.FAILED,
    TaskState.CANCELED,
})
# The progress timer only lives while the task is doing (simulated) work
PROGRESS_STATES = frozenset({
    TaskState.COMPRESSING,
    TaskState.AWAITING_URL,
    TaskState.UPLOADING,
})


@dataclass(frozen=True)
class ImageFile:
    """Immutable in-memory image submitted by the user."""
    name: str
    mime_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def size_mb(self) -> float:
        return self.size / 1024 / 1024

    def renamed(self, name: str) -> "ImageFile":
        return replace(self, name=name)

    @classmethod
    def from_path(cls, path: Union[str, Path], mime_type: Optional[str] = None) -> "ImageFile":
        """Read an image from disk, guessing the MIME type from its extension."""
        path = Path(path)
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            mime_type=mime_type or "application/octet-stream",
            data=path.read_bytes(),
        )


@dataclass(frozen=True)
class PollResult:
    """Answer of the result-availability check."""
    ready: bool
    url: Optional[str] = None
    mime_type: Optional[str] = None

    @classmethod
    def pending(cls) -> "PollResult":
        return cls(ready=False)

    @classmethod
    def available(cls, url: str, mime_type: Optional[str] = None) -> "PollResult":
        return cls(ready=True, url=url, mime_type=mime_type)


@dataclass
class UploadTask:
    """One in-flight submission, owned by the orchestrator."""
    source: Optional[ImageFile]
    profession: str
    object_name: str
    state: TaskState = TaskState.IDLE
    progress: int = 0
    poll_attempts: int = 0
    result: Optional[PollResult] = None
    error: Optional[str] = None
    preview: bool = False

    @property
    def succeeded(self) -> bool:
        return self.state == TaskState.SUCCEEDED


@dataclass(frozen=True)
class PluginConfig:
    """Immutable configuration injected into the orchestrator."""
    # Endpoints
    issuer_url: str = ""
    bucket_name: str = ""
    result_url: str = ""
    request_timeout: float = 60.0
    url_expiration_seconds: int = 3600

    # Object naming
    object_prefix: str = "previous"
    object_extension: str = ".jpg"

    # Progress (milliseconds, like the panel timers)
    progress_mode: str = "simulated"  # simulated | transfer
    estimated_completion_ms: int = 10_000
    progress_interval_ms: int = 100
    total_progress: int = 100
    preview_step: int = 10
    preview_interval_ms: int = 500

    # Polling
    polling_interval_ms: int = 3000
    max_poll_attempts: int = 40

    # Panel messages
    notice_duration_ms: int = 2000
    alert_message: str = "Got an Error. Please try again."
    cancel_notice: str = "The operation has been canceled."

    # Compression
    max_size_mb: float = 1.0
    max_width_or_height: int = 1920
    accepted_mime_types: Tuple[str, ...] = ("image/png", "image/jpeg")

    # Canvas
    background_flag_key: str = "backgroundImageSet"
    background_url: str = "https://swap-image.s3.us-east-1.amazonaws.com/bg.png"
    text_box_url: str = "https://swap-image.s3.us-east-1.amazonaws.com/text_box.png"
    preview_result_url: str = "https://d3es8s6of2yyy0.cloudfront.net/swapped_image_minver.jpg"
    caption_template: str = (
        "You are a passionate {profession} who approaches every day with care "
        "and dedication, always striving to do your best."
    )

    @property
    def max_size_bytes(self) -> int:
        return int(self.max_size_mb * 1024 * 1024)


# Canvas elements handed to the design host


@dataclass(frozen=True)
class PageDimensions:
    width: float
    height: float


@dataclass(frozen=True)
class AssetUploadRequest:
    """Asset upload request, tagged with an AI provenance disclosure."""
    mime_type: str
    url: str
    thumbnail_url: str
    type: str = "image"
    ai_disclosure: str = "app_generated"


@dataclass(frozen=True)
class ImageElement:
    ref: str
    width: float
    height: Union[float, str]
    top: float
    left: float
    alt_text: str = "Example image"
    decorative: bool = False
    type: str = "image"


@dataclass(frozen=True)
class TextElement:
    text: str
    width: float
    top: float
    left: float
    font_size: int = 25
    color: str = "#ffffff"
    type: str = "text"


@dataclass(frozen=True)
class GroupElement:
    children: List[Union[ImageElement, TextElement]]
    type: str = "group"


@dataclass(frozen=True)
class SelectOption:
    """Selectable option rendered by the panel's dropdowns."""
    index: int
    value: str
    label: str

    def as_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "value": self.value, "label": self.label}
