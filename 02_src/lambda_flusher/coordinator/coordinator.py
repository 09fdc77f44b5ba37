"""Flush coordinator: the extension's lifecycle loop."""

import asyncio
from enum import Enum
from typing import Protocol

from opentelemetry.context import Context

from ..errors import ExtensionError, FlushError, PollError, RegistrationError
from ..extension_api import IExtensionClient
from ..logging_config import get_logger
from ..models import LifecycleEvent, Registration
from ..telemetry import IExportPipeline, ISpanQueue, instrumentation_exempt_context

logger = get_logger(__name__)

DEFAULT_REPORT_TIMEOUT = 2.0  # seconds


class CoordinatorState(str, Enum):
    """Flush coordinator states."""

    INIT = "init"
    REGISTERED = "registered"
    WAITING_EVENT = "waiting_event"
    WAITING_SPANS = "waiting_spans"
    FLUSHING = "flushing"
    SHUTTING_DOWN = "shutting_down"
    FAILED = "failed"


class IFlushCoordinator(Protocol):
    """Register, then poll / wait for spans / flush until shutdown."""

    async def run(self) -> None:
        """Run the loop in the current task until shutdown or fatal error."""
        ...

    async def start(self) -> None:
        """Run the loop as a background task."""
        ...

    async def stop(self) -> None:
        """Interrupt waits and end the loop. An in-flight flush completes first."""
        ...


class FlushCoordinator:
    """Forces a flush after each invocation's spans arrive, before the next poll.

    The platform keeps the environment unfrozen only until the extension asks
    for the next event, so every iteration is strictly sequential:
    poll, wait for at least one span, flush, poll again.
    """

    def __init__(
        self,
        client: IExtensionClient,
        queue: ISpanQueue,
        pipeline: IExportPipeline,
        context: Context | None = None,
        report_timeout: float = DEFAULT_REPORT_TIMEOUT,
    ):
        self._client = client
        self._queue = queue
        self._pipeline = pipeline
        # Fresh root context: no active span becomes the parent of these calls
        self._context = context or instrumentation_exempt_context(Context())
        self._report_timeout = report_timeout

        self._state = CoordinatorState.INIT
        self._registration: Registration | None = None
        self._flush_count = 0
        self._task: asyncio.Task | None = None
        self._stopping = False

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def flush_count(self) -> int:
        return self._flush_count

    @property
    def registration(self) -> Registration | None:
        return self._registration

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    async def run(self) -> None:
        """Register once, then loop until SHUTDOWN, stop() or a fatal error."""
        if self._state is not CoordinatorState.INIT:
            raise RuntimeError(f"Coordinator cannot run from state {self._state.value}")

        try:
            self._registration = await self._client.register(self._context)
        except RegistrationError as e:
            self._state = CoordinatorState.FAILED
            logger.error("Extension registration failed: %s", e)
            raise
        self._state = CoordinatorState.REGISTERED

        while not self._stopping:
            self._state = CoordinatorState.WAITING_EVENT
            event = await self._poll()

            if event.is_shutdown:
                self._state = CoordinatorState.SHUTTING_DOWN
                logger.info(
                    "Shutdown event received",
                    extra={"context": {"reason": event.shutdown_reason}},
                )
                # Spans that arrived since the last flush still go out
                if self._queue.qsize():
                    self._queue.drain()
                    self._state = CoordinatorState.FLUSHING
                    await self._flush(event)
                    self._state = CoordinatorState.SHUTTING_DOWN
                return

            self._state = CoordinatorState.WAITING_SPANS
            await self._queue.wait_available()
            spans = self._queue.drain()

            self._state = CoordinatorState.FLUSHING
            logger.debug(
                "Flushing after invocation",
                extra={"context": {"request_id": event.request_id, "spans": len(spans)}},
            )
            await self._flush(event)

        self._state = CoordinatorState.SHUTTING_DOWN

    async def _poll(self) -> LifecycleEvent:
        try:
            return await self._client.next_event(self._context)
        except PollError as e:
            self._state = CoordinatorState.FAILED
            logger.error("Polling for the next event failed: %s", e)
            await self._report_exit_error(e)
            raise

    async def _report_exit_error(self, error: PollError) -> None:
        """Best-effort exit error report; the PollError propagates regardless."""
        try:
            await asyncio.wait_for(
                self._client.report_exit_error(
                    "Extension.PollError", str(error), self._context
                ),
                self._report_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Exit error report timed out after %.1f s", self._report_timeout
            )
        except (ExtensionError, RuntimeError) as e:
            logger.warning("Could not report exit error: %s", e)

    async def _flush(self, event: LifecycleEvent) -> None:
        """Flush the export pipeline; failures are logged, not raised.

        The flush is shielded from cancellation and always awaited to
        completion, since aborting it loses exactly the telemetry it exports.
        """
        flush_task = asyncio.create_task(self._pipeline.flush(self._context))
        try:
            await asyncio.shield(flush_task)
        except asyncio.CancelledError:
            await self._finish_flush(flush_task, event)
            raise
        except FlushError as e:
            self._log_flush_failure(e, event)
        self._flush_count += 1

    async def _finish_flush(self, flush_task: asyncio.Task, event: LifecycleEvent) -> None:
        try:
            await flush_task
        except FlushError as e:
            self._log_flush_failure(e, event)
        self._flush_count += 1

    @staticmethod
    def _log_flush_failure(error: FlushError, event: LifecycleEvent) -> None:
        logger.error(
            "Telemetry flush failed: %s",
            error,
            extra={
                "context": {
                    "request_id": event.request_id,
                    "event_type": event.kind.value,
                }
            },
        )

    async def start(self) -> None:
        """Run the loop as a background task."""
        if self._task is not None:
            raise RuntimeError("Coordinator already started")
        self._task = asyncio.create_task(self.run(), name="lambda-flush-coordinator")

    async def stop(self) -> None:
        """Stop the loop. Waits are cancelled; a running flush finishes first."""
        self._stopping = True
        if self._task is None or self._task.done():
            return

        if self._state is not CoordinatorState.FLUSHING:
            self._task.cancel()

        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            if self._state is not CoordinatorState.FAILED:
                self._state = CoordinatorState.SHUTTING_DOWN
