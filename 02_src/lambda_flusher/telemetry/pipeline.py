"""Export pipeline flush capability."""

import asyncio
from typing import Protocol

from opentelemetry.context import Context

from ..config import DEFAULT_FLUSH_TIMEOUT_MILLIS
from ..errors import FlushError
from ..logging_config import get_logger
from .suppression import instrumentation_exempt_context, use_context

logger = get_logger(__name__)


class IFlushable(Protocol):
    """Anything exposing a blocking force-flush (an SDK TracerProvider)."""

    def force_flush(self, timeout_millis: int = DEFAULT_FLUSH_TIMEOUT_MILLIS) -> bool:
        ...


class IExportPipeline(Protocol):
    """Flush-now capability used by the coordinator."""

    async def flush(self, context: Context | None = None) -> None:
        """Synchronously deliver all buffered telemetry. Raises FlushError."""
        ...


class ExportPipeline:
    """Runs ``force_flush`` on a worker thread inside an exempt context."""

    def __init__(
        self,
        provider: IFlushable,
        timeout_millis: int = DEFAULT_FLUSH_TIMEOUT_MILLIS,
    ):
        self._provider = provider
        self._timeout_millis = timeout_millis

    async def flush(self, context: Context | None = None) -> None:
        """Force the provider to export everything it has buffered."""
        if context is None:
            context = instrumentation_exempt_context()

        # to_thread copies the current contextvars, exempt context included
        with use_context(context):
            try:
                flushed = await asyncio.to_thread(
                    self._provider.force_flush, self._timeout_millis
                )
            except Exception as e:
                raise FlushError(f"Export pipeline flush failed: {e}") from e

        if not flushed:
            raise FlushError(
                f"Export pipeline flush did not complete within {self._timeout_millis} ms"
            )
