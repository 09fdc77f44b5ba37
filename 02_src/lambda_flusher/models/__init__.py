"""Core data models for the Lambda flush extension."""

from .lifecycle import EventKind, LifecycleEvent
from .registration import Registration
from .spans import FinishedSpan

__all__ = [
    # Control plane
    "Registration",
    "EventKind",
    "LifecycleEvent",
    # Telemetry
    "FinishedSpan",
]
