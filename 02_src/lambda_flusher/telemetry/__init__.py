"""Telemetry pipeline integration."""

from .handoff import HandoffQueue, ISpanQueue
from .observer import SpanObserver
from .pipeline import ExportPipeline, IExportPipeline, IFlushable
from .suppression import (
    instrumentation_exempt_context,
    is_instrumentation_exempt,
    use_context,
)

__all__ = [
    "HandoffQueue",
    "ISpanQueue",
    "SpanObserver",
    "ExportPipeline",
    "IExportPipeline",
    "IFlushable",
    "instrumentation_exempt_context",
    "is_instrumentation_exempt",
    "use_context",
]
