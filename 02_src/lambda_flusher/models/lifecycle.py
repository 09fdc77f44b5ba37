"""Lifecycle event models."""

from dataclasses import dataclass
from enum import Enum


class EventKind(str, Enum):
    """Lifecycle events dispatched by the Extensions API."""

    INVOKE = "INVOKE"
    SHUTDOWN = "SHUTDOWN"


@dataclass
class LifecycleEvent:
    """A single event returned by the next-event long poll."""

    kind: EventKind
    raw_payload: bytes
    request_id: str | None = None
    deadline_ms: int | None = None
    invoked_function_arn: str | None = None
    shutdown_reason: str | None = None  # SHUTDOWN only

    @property
    def is_shutdown(self) -> bool:
        return self.kind is EventKind.SHUTDOWN
