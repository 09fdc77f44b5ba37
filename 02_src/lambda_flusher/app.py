"""Extension bootstrap and lifecycle management."""

import asyncio
from typing import Callable, Protocol

from opentelemetry.sdk.trace import TracerProvider

from .config import ExtensionSettings
from .coordinator import FlushCoordinator
from .extension_api import ExtensionClient, IExtensionClient
from .logging_config import get_logger
from .telemetry import ExportPipeline, HandoffQueue, SpanObserver

logger = get_logger(__name__)

FatalErrorHandler = Callable[[BaseException], None]


class ILambdaExtension(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order and start the loop."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...


class LambdaExtension:
    """Wires the span observer, control-plane client, pipeline and coordinator."""

    def __init__(
        self,
        tracer_provider: TracerProvider,
        settings: ExtensionSettings | None = None,
        client: IExtensionClient | None = None,
        on_fatal: FatalErrorHandler | None = None,
    ):
        self._tracer_provider = tracer_provider
        self._settings = settings or ExtensionSettings.from_env()
        self._client_override = client
        self._on_fatal = on_fatal

        # Components (initialized in start())
        self._queue: HandoffQueue | None = None
        self._observer: SpanObserver | None = None
        self._client: IExtensionClient | None = None
        self._pipeline: ExportPipeline | None = None
        self._coordinator: FlushCoordinator | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting Lambda extension")

        # 1. Hand-off queue (no dependencies)
        self._queue = HandoffQueue()

        # 2. Span subscription, before the first poll so no span is missed
        self._observer = SpanObserver(self._queue, self._settings.observed_sources)
        self._observer.attach(self._tracer_provider)

        # 3. Control-plane client
        self._client = self._client_override or ExtensionClient(
            runtime_api=self._settings.runtime_api,
            extension_name=self._settings.extension_name,
            events=self._settings.events,
        )

        # 4. Export pipeline
        self._pipeline = ExportPipeline(
            self._tracer_provider,
            timeout_millis=self._settings.flush_timeout_millis,
        )

        # 5. Coordinator (depends on all of the above)
        self._coordinator = FlushCoordinator(
            client=self._client,
            queue=self._queue,
            pipeline=self._pipeline,
        )
        await self._coordinator.start()
        self._coordinator.task.add_done_callback(self._handle_coordinator_exit)
        logger.info("Flush coordinator started")

    def _handle_coordinator_exit(self, task: asyncio.Task) -> None:
        # Nobody consumes the queue any more
        if self._observer:
            self._observer.shutdown()
        if self._queue:
            self._queue.drain()

        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            logger.info("Flush coordinator finished")
            return

        logger.critical(
            "Flush coordinator stopped on fatal error",
            exc_info=(type(error), error, error.__traceback__),
        )
        if self._on_fatal:
            self._on_fatal(error)

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._coordinator:
            await self._coordinator.stop()
        if self._observer:
            self._observer.shutdown()
        if self._client:
            await self._client.aclose()
            logger.info("Extension API client closed")

    @property
    def coordinator(self) -> FlushCoordinator:
        """Get coordinator instance."""
        if not self._coordinator:
            raise RuntimeError("Extension not started")
        return self._coordinator

    @property
    def queue(self) -> HandoffQueue:
        """Get hand-off queue instance."""
        if not self._queue:
            raise RuntimeError("Extension not started")
        return self._queue


def add_lambda_extension(
    tracer_provider: TracerProvider,
    settings: ExtensionSettings | None = None,
    on_fatal: FatalErrorHandler | None = None,
) -> LambdaExtension:
    """Create a flush extension bound to ``tracer_provider``."""
    return LambdaExtension(tracer_provider, settings=settings, on_fatal=on_fatal)
