"""Finished span snapshot handed from the request path to the coordinator."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.trace import format_span_id, format_trace_id


@dataclass
class FinishedSpan:
    """A completed span, reduced to what the coordinator may log."""

    name: str
    source: str  # instrumentation scope name
    duration: timedelta
    trace_id: str
    span_id: str
    end_time: datetime | None = None

    @staticmethod
    def source_of(span: ReadableSpan) -> str:
        """Instrumentation scope name of a span, empty if unknown."""
        scope = span.instrumentation_scope
        return scope.name if scope is not None else ""

    @classmethod
    def from_readable_span(cls, span: ReadableSpan) -> "FinishedSpan":
        start = span.start_time or 0
        end = span.end_time or start
        context = span.get_span_context()
        return cls(
            name=span.name,
            source=cls.source_of(span),
            duration=timedelta(microseconds=(end - start) / 1000),
            trace_id=format_trace_id(context.trace_id),
            span_id=format_span_id(context.span_id),
            end_time=(
                datetime.fromtimestamp(span.end_time / 1e9, tz=timezone.utc)
                if span.end_time
                else None
            ),
        )
