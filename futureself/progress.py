"""
Progress strategies.

A task picks exactly one strategy when it starts. Timer-driven strategies
advance the bar on every tick; ``TransferProgress`` has no timer and follows
the bytes reported by the object store instead.
"""
from abc import ABC, abstractmethod
from typing import Optional

from .models import PluginConfig


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


class ProgressStrategy(ABC):
    """Decides how the visible percentage moves while a task works."""

    name = "base"
    uses_timer = True
    completes_task = False

    def __init__(self, interval_ms: int = 100, total: int = 100):
        self.interval_ms = interval_ms
        self.total = total

    @property
    def interval(self) -> float:
        return self.interval_ms / 1000

    @abstractmethod
    def advance(self, current: int) -> int:
        """Value after one timer tick."""
        pass

    def on_transfer(self, current: int, sent: int, size: int) -> int:
        """Value after the object store reports ``sent`` of ``size`` bytes."""
        return current

    def _clamp(self, value: int) -> int:
        return max(0, min(value, self.total))


class LinearEstimateProgress(ProgressStrategy):
    """Simulated bar that fills up over an estimated completion time."""

    name = "simulated"

    def __init__(self, estimated_ms: int = 10_000, interval_ms: int = 100, total: int = 100):
        super().__init__(interval_ms, total)
        self.estimated_ms = estimated_ms
        updates = max(1, _ceil_div(estimated_ms, interval_ms))
        self.step = _ceil_div(total, updates)

    def advance(self, current: int) -> int:
        return self._clamp(current + self.step)


class FixedStepProgress(ProgressStrategy):
    """Preview bar: fixed steps; reaching the total completes the task."""

    name = "preview"
    completes_task = True

    def __init__(self, step: int = 10, interval_ms: int = 500, total: int = 100):
        super().__init__(interval_ms, total)
        self.step = step

    def advance(self, current: int) -> int:
        return self._clamp(current + self.step)


class TransferProgress(ProgressStrategy):
    """Real feedback from the upload body stream."""

    name = "transfer"
    uses_timer = False

    def advance(self, current: int) -> int:
        return current

    def on_transfer(self, current: int, sent: int, size: int) -> int:
        if size <= 0:
            return current
        return max(current, self._clamp(sent * self.total // size))


def make_progress_strategy(config: Optional[PluginConfig] = None) -> ProgressStrategy:
    """Strategy for a regular upload task, chosen by ``config.progress_mode``."""
    config = config or PluginConfig()
    if config.progress_mode == "simulated":
        return LinearEstimateProgress(
            estimated_ms=config.estimated_completion_ms,
            interval_ms=config.progress_interval_ms,
            total=config.total_progress,
        )
    if config.progress_mode == "transfer":
        return TransferProgress(total=config.total_progress)
    raise ValueError(f"Unknown progress mode: {config.progress_mode}")


def make_preview_strategy(config: Optional[PluginConfig] = None) -> FixedStepProgress:
    config = config or PluginConfig()
    return FixedStepProgress(
        step=config.preview_step,
        interval_ms=config.preview_interval_ms,
        total=config.total_progress,
    )
