"""
futureself - "future self" portrait upload orchestration.

A user picks a profession, submits a selfie, and the orchestrator compresses
it, requests a signed upload URL, uploads it, polls until the composited
result is ready and hands it to the canvas composer.

Usage:
    from futureself import UploadOrchestrator, ImageFile, PluginConfig

    config = PluginConfig(
        issuer_url="https://issuer.example.com/default",
        bucket_name="selfies",
        result_url="https://results.example.com/status",
    )
    async with UploadOrchestrator(config) as orchestrator:
        task = await orchestrator.submit(ImageFile.from_path("me.png"), "Writer")
        print(task.state, task.result)

    # Cancel from elsewhere (e.g. a button handler)
    orchestrator.cancel()
"""
from .catalog import CategoryJobIndex, PROFESSIONS_BY_CATEGORY
from .errors import (
    FutureSelfError,
    HostError,
    InvalidSubmissionError,
    Offline,
    PermissionDenied,
    TaskInProgressError,
    Timeout,
    UnknownHostError,
    UnsupportedImageError,
    describe_host_error,
)
from .models import ImageFile, PluginConfig, PollResult, TaskState, UploadTask
from .naming import make_object_name
from .orchestrator import BackgroundInitializer, CanvasComposer, UploadOrchestrator
from .services import (
    HTTPResultPoller,
    ImageCompressor,
    InMemoryKeyValueStore,
    JSONFileKeyValueStore,
    SignedURLIssuer,
    SignedURLObjectStore,
)

__version__ = "0.1.0"
__all__ = [
    # Main
    "UploadOrchestrator",
    "CanvasComposer",
    "BackgroundInitializer",
    "CategoryJobIndex",
    "PROFESSIONS_BY_CATEGORY",
    "make_object_name",
    # Models
    "ImageFile",
    "PluginConfig",
    "PollResult",
    "TaskState",
    "UploadTask",
    # Services
    "HTTPResultPoller",
    "ImageCompressor",
    "InMemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "SignedURLIssuer",
    "SignedURLObjectStore",
    # Errors
    "FutureSelfError",
    "HostError",
    "InvalidSubmissionError",
    "Offline",
    "PermissionDenied",
    "TaskInProgressError",
    "Timeout",
    "UnknownHostError",
    "UnsupportedImageError",
    "describe_host_error",
]
