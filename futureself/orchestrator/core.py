"""Core orchestrator - drives one upload task from submission to a terminal state."""
import asyncio
import logging
from typing import Callable, Optional

import httpx

from ..errors import (
    HostError,
    InvalidSubmissionError,
    TaskInProgressError,
    describe_host_error,
)
from ..models import (
    ImageFile,
    PluginConfig,
    PollResult,
    PROGRESS_STATES,
    TaskState,
    UploadTask,
)
from ..naming import make_object_name
from ..progress import ProgressStrategy, make_preview_strategy, make_progress_strategy
from ..protocols import ICompressor, IObjectStore, IResultPoller, IURLIssuer
from ..services.compressor import ImageCompressor
from ..services.object_store import SignedURLObjectStore
from ..services.result_poller import HTTPResultPoller
from ..services.url_issuer import SignedURLIssuer
from ..utils.events import EventEmitter
from .composer import CanvasComposer
from .timers import RepeatingTimer

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    """
    Orchestrates compress → issue URL → upload → poll using injected services.

    Two repeating timers run next to the pipeline: the progress timer while
    the task works, the polling timer while it waits for the result. Every
    exit path (success, failure, cancel, reset, close) cancels both.

    Usage:
        async with UploadOrchestrator(config) as orchestrator:
            orchestrator.on("progress", lambda task: print(task.progress))
            task = await orchestrator.submit(ImageFile.from_path(path), "Writer")

        # With injected services (tests, custom backends)
        orchestrator = UploadOrchestrator(
            config, compressor=..., issuer=..., store=..., poller=...
        )

    Events:
        state(task), progress(task), alert(message), notice(message),
        notice_cleared(), succeeded(task), reset()
    """

    def __init__(
        self,
        config: Optional[PluginConfig] = None,
        compressor: Optional[ICompressor] = None,
        issuer: Optional[IURLIssuer] = None,
        store: Optional[IObjectStore] = None,
        poller: Optional[IResultPoller] = None,
        composer: Optional[CanvasComposer] = None,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            config: Plugin configuration
            compressor: Image compressor (default: ImageCompressor)
            issuer: Signed-URL issuer (default built in __aenter__)
            store: Object store (default built in __aenter__)
            poller: Result poller (default built in __aenter__)
            composer: Places succeeded results on the canvas
        """
        self._config = config or PluginConfig()
        self._compressor = compressor or ImageCompressor(self._config)
        self._issuer = issuer
        self._store = store
        self._poller = poller
        self._composer = composer
        self._events = EventEmitter()

        self._http: Optional[httpx.AsyncClient] = None
        self._task: Optional[UploadTask] = None
        self._strategy: Optional[ProgressStrategy] = None
        self._done: Optional[asyncio.Future] = None
        self._runner: Optional[asyncio.Task] = None
        self._progress_timer: Optional[RepeatingTimer] = None
        self._polling_timer: Optional[RepeatingTimer] = None
        self._notice: Optional[str] = None
        self._notice_handle: Optional[asyncio.TimerHandle] = None

    async def __aenter__(self):
        """Build HTTP-backed services that were not injected."""
        if self._issuer is None or self._store is None or self._poller is None:
            self._http = httpx.AsyncClient(timeout=self._config.request_timeout)
            self._issuer = self._issuer or SignedURLIssuer(self._http, self._config)
            self._store = self._store or SignedURLObjectStore(self._http)
            self._poller = self._poller or HTTPResultPoller(self._http, self._config)
        return self

    async def __aexit__(self, *args):
        await self.close()

    # Introspection

    @property
    def config(self) -> PluginConfig:
        return self._config

    @property
    def task(self) -> Optional[UploadTask]:
        return self._task

    @property
    def state(self) -> TaskState:
        return self._task.state if self._task else TaskState.IDLE

    @property
    def progress(self) -> int:
        return self._task.progress if self._task else 0

    @property
    def notice(self) -> Optional[str]:
        return self._notice

    @property
    def busy(self) -> bool:
        return self._task is not None and self._task.state.is_active

    @property
    def active_timers(self) -> int:
        """Live progress/polling timers (never more than one)."""
        return sum(
            1 for timer in (self._progress_timer, self._polling_timer)
            if timer is not None and (timer.active or timer.pending)
        )

    def on(self, event_name: str, callback: Callable):
        self._events.on(event_name, callback)

    def off(self, event_name: str, callback: Callable):
        self._events.off(event_name, callback)

    # Operations

    def start(self, image: ImageFile, profession: str) -> UploadTask:
        """
        Start a new task; returns once it is COMPRESSING with progress 0.

        Raises:
            TaskInProgressError: another task is still active
            InvalidSubmissionError: missing image/profession or wrong MIME type
        """
        self._ensure_idle()
        profession = (profession or "").strip()
        if not profession:
            raise InvalidSubmissionError("A profession must be selected")
        if image is None or not image.data:
            raise InvalidSubmissionError("An image must be uploaded")
        if image.mime_type not in self._config.accepted_mime_types:
            raise InvalidSubmissionError(f"Unsupported image type: {image.mime_type}")
        if self._issuer is None or self._store is None or self._poller is None:
            raise RuntimeError("UploadOrchestrator not initialized. Use 'async with' context.")

        task = UploadTask(
            source=image,
            profession=profession,
            object_name=make_object_name(profession, self._config),
        )
        self._begin(task, make_progress_strategy(self._config))
        self._runner = asyncio.create_task(self._run(task))
        logger.info("Task %s started for %s", task.object_name, profession)
        return task

    def start_preview(self, profession: str) -> UploadTask:
        """
        Start a preview task: no network, fixed progress steps, and on
        reaching 100% the preview result is placed on the canvas.
        """
        self._ensure_idle()
        profession = (profession or "").strip()
        if not profession:
            raise InvalidSubmissionError("A profession must be selected")

        task = UploadTask(
            source=None,
            profession=profession,
            object_name=make_object_name(profession, self._config),
            preview=True,
        )
        self._begin(task, make_preview_strategy(self._config))
        self._set_state(task, TaskState.UPLOADING)
        logger.info("Preview task started for %s", profession)
        return task

    async def wait(self) -> Optional[UploadTask]:
        """Wait until the current task reaches a terminal state."""
        task = self._task
        if self._done is not None:
            await asyncio.shield(self._done)
        return task

    async def submit(self, image: ImageFile, profession: str) -> UploadTask:
        """Start a task and wait for it to finish."""
        task = self.start(image, profession)
        await self.wait()
        return task

    def cancel(self) -> bool:
        """
        Cancel the active task.

        Stops both timers and resets progress. A request already sent keeps
        running; its answer is ignored.

        Returns:
            False if there was nothing to cancel
        """
        task = self._task
        if task is None or not task.state.is_active:
            return False

        self._cancel_timers()
        self._set_state(task, TaskState.CANCELED)
        self._set_progress(task, 0)
        self._show_notice(self._config.cancel_notice)
        self._resolve()
        logger.info("Task %s canceled", task.object_name)
        return True

    def reset(self) -> None:
        """Drop the current task and go back to IDLE. Idempotent."""
        self._cancel_timers()
        task, self._task = self._task, None
        self._strategy = None
        self._resolve()
        if task is not None:
            logger.debug("Task %s reset", task.object_name)
            self._events.emit("reset")

    async def close(self) -> None:
        """Tear down: reset, clear the notice, stop the pipeline, close HTTP."""
        self._cancel_timers(abort=True)
        self.reset()
        self._clear_notice()
        runner, self._runner = self._runner, None
        if runner is not None and not runner.done():
            runner.cancel()
            try:
                await runner
            except asyncio.CancelledError:
                pass
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    # Pipeline

    async def _run(self, task: UploadTask) -> None:
        image = await self._compress(task)
        if self._superseded(task):
            return

        self._set_state(task, TaskState.AWAITING_URL)
        try:
            url = await self._issuer.issue(
                task.object_name,
                image.mime_type,
                self._config.url_expiration_seconds,
            )
        except Exception as e:
            logger.error("URL issuance failed for %s: %s", task.object_name, e)
            url = None
        if self._superseded(task):
            return
        if not url:
            self._fail(task, "Could not obtain an upload URL")
            return

        self._set_state(task, TaskState.UPLOADING)
        callback = None
        if self._strategy is not None and not self._strategy.uses_timer:
            callback = self._transfer_callback(task)
        try:
            uploaded = await self._store.put(url, image, progress_callback=callback)
        except Exception as e:
            logger.error("Upload failed for %s: %s", task.object_name, e)
            uploaded = False
        if self._superseded(task):
            return
        if not uploaded:
            self._fail(task, "Upload to storage failed")
            return

        self._start_polling(task)

    async def _compress(self, task: UploadTask) -> ImageFile:
        try:
            return await self._compressor.compress(task.source, task.object_name)
        except Exception as e:
            logger.warning("Error compressing image, uploading original: %s", e)
            return task.source.renamed(task.object_name)

    def _start_polling(self, task: UploadTask) -> None:
        # Progress timer only lives in the working states
        self._cancel_progress_timer()
        self._set_state(task, TaskState.POLLING)
        self._polling_timer = RepeatingTimer(
            self._config.polling_interval_ms / 1000,
            lambda: self._poll(task),
            name="polling-timer",
        ).start()
        logger.info("Polling for %s", task.object_name)

    async def _poll(self, task: UploadTask) -> None:
        if self._superseded(task) or task.state != TaskState.POLLING:
            return

        task.poll_attempts += 1
        try:
            result = await self._poller.check(task.object_name)
        except Exception as e:
            logger.warning("Result check %d for %s failed: %s", task.poll_attempts, task.object_name, e)
            result = None
        if self._superseded(task) or task.state != TaskState.POLLING:
            return

        if result is not None and result.ready:
            await self._succeed(task, result)
            return

        if task.poll_attempts >= self._config.max_poll_attempts:
            self._fail(task, f"No result after {task.poll_attempts} checks")

    # Progress

    def _progress_tick(self, task: UploadTask) -> None:
        if self._superseded(task) or task.state not in PROGRESS_STATES:
            return
        strategy = self._strategy
        self._set_progress(task, strategy.advance(task.progress))
        if strategy.completes_task and task.progress >= strategy.total:
            self._cancel_progress_timer()
            # Completion runs outside the tick so the placement does not block the timer
            self._runner = asyncio.ensure_future(
                self._succeed(task, PollResult.available(self._config.preview_result_url, "image/jpeg"))
            )

    def _transfer_callback(self, task: UploadTask):
        def callback(sent: int, total: int) -> None:
            if self._superseded(task) or task.state != TaskState.UPLOADING:
                return
            self._set_progress(task, self._strategy.on_transfer(task.progress, sent, total))
        return callback

    # Terminal transitions

    async def _succeed(self, task: UploadTask, result: PollResult) -> None:
        if self._superseded(task):
            return
        self._cancel_timers()
        task.result = result
        self._set_progress(task, self._config.total_progress)
        self._set_state(task, TaskState.SUCCEEDED)
        logger.info("Task %s succeeded: %s", task.object_name, result.url)
        self._events.emit("succeeded", task)

        if self._composer is not None:
            try:
                await self._composer.place_result(result, task.profession)
            except HostError as e:
                logger.error("Placing result failed [%s]: %s", e.code, describe_host_error(e))
            except Exception as e:
                logger.error("Placing result failed: %s", e)

        if self._task is task:
            self._resolve()

    def _fail(self, task: UploadTask, reason: str) -> None:
        self._cancel_timers()
        task.error = reason
        self._set_state(task, TaskState.FAILED)
        self._set_progress(task, 0)
        logger.error("Task %s failed: %s", task.object_name, reason)
        self._events.emit("alert", self._config.alert_message)
        self._resolve()

    # Helpers

    def _ensure_idle(self) -> None:
        if self.busy:
            raise TaskInProgressError(
                f"Task {self._task.object_name} is already in progress ({self._task.state.value})"
            )

    def _begin(self, task: UploadTask, strategy: ProgressStrategy) -> None:
        self._cancel_timers()
        self._clear_notice()
        self._resolve()
        self._task = task
        self._strategy = strategy
        self._done = asyncio.get_running_loop().create_future()
        self._set_state(task, TaskState.COMPRESSING)
        self._set_progress(task, 0)
        if strategy.uses_timer:
            self._progress_timer = RepeatingTimer(
                strategy.interval,
                lambda: self._progress_tick(task),
                name="progress-timer",
            ).start()

    def _superseded(self, task: UploadTask) -> bool:
        return self._task is not task or task.state.is_terminal

    def _set_state(self, task: UploadTask, state: TaskState) -> None:
        if task.state == state:
            return
        logger.debug("Task %s: %s -> %s", task.object_name, task.state.value, state.value)
        task.state = state
        self._events.emit("state", task)

    def _set_progress(self, task: UploadTask, value: int) -> None:
        if task.progress == value:
            return
        task.progress = value
        self._events.emit("progress", task)

    def _cancel_progress_timer(self) -> None:
        if self._progress_timer is not None:
            self._progress_timer.cancel()
            self._progress_timer = None

    def _cancel_polling_timer(self, abort: bool = False) -> None:
        if self._polling_timer is not None:
            if abort:
                self._polling_timer.abort()
            else:
                # An in-flight result check finishes and is discarded
                self._polling_timer.cancel()
            self._polling_timer = None

    def _cancel_timers(self, abort: bool = False) -> None:
        self._cancel_progress_timer()
        self._cancel_polling_timer(abort)

    def _resolve(self) -> None:
        if self._done is not None and not self._done.done():
            self._done.set_result(None)

    def _show_notice(self, message: str) -> None:
        self._clear_notice(emit=False)
        self._notice = message
        self._events.emit("notice", message)
        loop = asyncio.get_running_loop()
        self._notice_handle = loop.call_later(
            self._config.notice_duration_ms / 1000,
            self._clear_notice,
        )

    def _clear_notice(self, emit: bool = True) -> None:
        if self._notice_handle is not None:
            self._notice_handle.cancel()
            self._notice_handle = None
        if self._notice is not None:
            self._notice = None
            if emit:
                self._events.emit("notice_cleared")
