"""Orchestrator package - drives upload tasks and places their results."""
from .composer import BackgroundInitializer, CanvasComposer
from .core import UploadOrchestrator
from .timers import RepeatingTimer

__all__ = ["UploadOrchestrator", "CanvasComposer", "BackgroundInitializer", "RepeatingTimer"]
