"""Pytest configuration and fixtures."""

import sys
from datetime import timedelta
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from lambda_flusher.models import EventKind, FinishedSpan, LifecycleEvent, Registration  # noqa: E402


def make_span(name: str = "GET /", source: str = "opentelemetry.instrumentation.fastapi") -> FinishedSpan:
    """Build a finished span snapshot."""
    return FinishedSpan(
        name=name,
        source=source,
        duration=timedelta(milliseconds=5),
        trace_id="0" * 31 + "1",
        span_id="0" * 15 + "1",
    )


def make_event(kind: EventKind, request_id: str | None = None) -> LifecycleEvent:
    """Build a lifecycle event."""
    return LifecycleEvent(kind=kind, raw_payload=b"{}", request_id=request_id)


@pytest.fixture
def span_queue():
    """Create an empty hand-off queue."""
    from lambda_flusher.telemetry import HandoffQueue

    return HandoffQueue()


@pytest.fixture
def tracer_provider():
    """Create a local tracer provider (never the global one)."""
    from opentelemetry.sdk.trace import TracerProvider

    provider = TracerProvider()
    yield provider
    provider.shutdown()


@pytest.fixture
def mock_client():
    """Create mock Extensions API client."""
    client = Mock()
    client.register = AsyncMock(
        return_value=Registration(extension_name="test-ext", id="abc123")
    )
    client.next_event = AsyncMock(return_value=make_event(EventKind.SHUTDOWN))
    client.report_exit_error = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def mock_pipeline():
    """Create mock export pipeline."""
    pipeline = Mock()
    pipeline.flush = AsyncMock(return_value=None)
    return pipeline


@pytest.fixture
def scripted_poll(span_queue):
    """Build a next_event side effect that replays events.

    Each INVOKE pushes ``spans_per_invoke`` spans, standing in for the
    function producing telemetry while it handles the invocation.
    """

    def build(events: list[LifecycleEvent], spans_per_invoke: int = 1):
        script = iter(events)

        async def next_event(context=None):
            event = next(script)
            if event.kind is EventKind.INVOKE:
                for _ in range(spans_per_invoke):
                    span_queue.push(make_span())
            return event

        return next_event

    return build
