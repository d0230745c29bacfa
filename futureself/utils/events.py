from typing import Callable, Dict, List, Set
import asyncio
import inspect
import logging
logger = logging.getLogger(__name__)


class EventEmitter:
    """Simple event emitter for orchestrator events."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}
        self._pending: Set[asyncio.Future] = set()

    def on(self, event_name: str, callback: Callable):
        """Subscribe to an event."""
        if event_name not in self._listeners:
            self._listeners[event_name] = []
        if callback not in self._listeners[event_name]:
            self._listeners[event_name].append(callback)

    def off(self, event_name: str, callback: Callable):
        """Unsubscribe from an event."""
        if event_name in self._listeners:
            if callback in self._listeners[event_name]:
                self._listeners[event_name].remove(callback)

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, []))

    def emit(self, event_name: str, *args, **kwargs):
        """
        Emit an event to all listeners.

        Plain callbacks run inline; coroutine callbacks are scheduled on the
        running loop so state transitions never wait on a listener.
        """
        if event_name not in self._listeners:
            return

        for callback in self._listeners[event_name][:]:  # Copy list to avoid modification during iteration
            try:
                result = callback(*args, **kwargs)
                if inspect.isawaitable(result):
                    future = asyncio.ensure_future(result)
                    self._pending.add(future)
                    future.add_done_callback(self._listener_done(event_name))
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}")

    @property
    def pending(self) -> int:
        """Async listeners still running."""
        return len(self._pending)

    def _listener_done(self, event_name: str):
        def done(future: asyncio.Future) -> None:
            self._pending.discard(future)
            if not future.cancelled() and future.exception() is not None:
                logger.error(f"Error in event listener for {event_name}: {future.exception()}")
        return done
