"""Span observer: subscribes to finished spans and hands them off."""

from typing import Iterable

from opentelemetry.context import Context
from opentelemetry.sdk.trace import ReadableSpan, Span, SpanProcessor, TracerProvider

from ..config import ALL_SOURCES, DEFAULT_OBSERVED_SOURCES
from ..logging_config import get_logger
from ..models import FinishedSpan
from .handoff import ISpanQueue

logger = get_logger(__name__)


class SpanObserver(SpanProcessor):
    """Pushes finished spans from observed sources onto a hand-off queue.

    ``on_end`` runs on the request-serving path, so it never blocks and never
    raises into the caller.
    """

    def __init__(
        self,
        queue: ISpanQueue,
        sources: Iterable[str] = DEFAULT_OBSERVED_SOURCES,
    ):
        self._queue = queue
        self._sources = frozenset(sources)
        self._observe_all = ALL_SOURCES in self._sources
        self._attached = False
        self._closed = False

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self, tracer_provider: TracerProvider) -> None:
        """Subscribe to span completion on ``tracer_provider``. Once only."""
        if self._attached:
            raise RuntimeError("SpanObserver already attached")
        tracer_provider.add_span_processor(self)
        self._attached = True
        logger.info(
            "Span observer attached",
            extra={"context": {"sources": sorted(self._sources)}},
        )

    def observes(self, source: str) -> bool:
        """Filter predicate on instrumentation scope name."""
        return self._observe_all or source in self._sources

    def on_start(self, span: Span, parent_context: Context | None = None) -> None:
        return

    def on_end(self, span: ReadableSpan) -> None:
        if self._closed:
            return
        if not self.observes(FinishedSpan.source_of(span)):
            return
        try:
            self._queue.push(FinishedSpan.from_readable_span(span))
        except Exception:
            logger.exception("Failed to hand off span %s", span.name)

    def shutdown(self) -> None:
        """Stop observing. Later notifications are ignored."""
        self._closed = True

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        # Nothing buffered here
        return True
