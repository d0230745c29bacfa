"""Repeating timers driven by the running event loop."""
import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """
    Calls ``callback`` every ``interval`` seconds until cancelled.

    If the callback returns an awaitable, the next tick is only scheduled once
    it has finished, so two ticks of the same timer never overlap.
    """

    def __init__(self, interval: float, callback: Callable[[], Any], name: str = "timer"):
        if interval <= 0:
            raise ValueError(f"{name}: interval must be positive, got {interval}")
        self._interval = interval
        self._callback = callback
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._inflight: Optional[asyncio.Future] = None
        self._active = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def active(self) -> bool:
        return self._active

    @property
    def pending(self) -> bool:
        """True while a tick is scheduled or an async tick is running."""
        if self._handle is not None:
            return True
        return self._inflight is not None and not self._inflight.done()

    def start(self) -> "RepeatingTimer":
        if self._active:
            raise RuntimeError(f"{self._name} is already running")
        self._loop = asyncio.get_running_loop()
        self._active = True
        self._schedule()
        logger.debug("%s started (every %.3fs)", self._name, self._interval)
        return self

    def cancel(self) -> None:
        """
        Stop ticking. Safe to call any number of times.

        A tick that is already running is left to finish; its result is the
        callback's concern. Use ``abort`` to also cancel it.
        """
        was_active = self._active
        self._active = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if was_active:
            logger.debug("%s cancelled", self._name)

    def abort(self) -> None:
        """Stop ticking and cancel a running async tick."""
        self.cancel()
        inflight = self._inflight
        if inflight is not None and not inflight.done():
            # A tick may abort its own timer; never cancel the running tick itself
            if inflight is not asyncio.current_task():
                inflight.cancel()

    def _schedule(self) -> None:
        assert self._loop is not None
        self._handle = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        self._handle = None
        if not self._active:
            return

        try:
            result = self._callback()
        except Exception:
            logger.exception("%s: tick failed", self._name)
            result = None

        if inspect.isawaitable(result):
            self._inflight = asyncio.ensure_future(result)
            self._inflight.add_done_callback(self._after_tick)
        elif self._active:
            self._schedule()

    def _after_tick(self, future: asyncio.Future) -> None:
        if future is self._inflight:
            self._inflight = None
        if not future.cancelled() and future.exception() is not None:
            logger.error("%s: tick failed: %s", self._name, future.exception())
        if self._active and self._handle is None:
            self._schedule()
