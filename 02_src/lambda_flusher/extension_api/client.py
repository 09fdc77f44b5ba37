"""Extensions API client: registration, next-event long poll, error reports."""

from typing import Protocol, Sequence

import httpx
from opentelemetry.context import Context
from pydantic import ValidationError

from ..config import DEFAULT_EXTENSION_NAME, resolve_runtime_api
from ..errors import ExtensionError, PollError, RegistrationError
from ..logging_config import get_logger
from ..models import EventKind, LifecycleEvent, Registration
from ..telemetry.suppression import instrumentation_exempt_context, use_context
from .schemas import ErrorReport, NextEventResponse, RegisterRequest, RegisterResponse

logger = get_logger(__name__)

# Registers a new extension name with the Extensions API
EXTENSION_NAME_HEADER = "Lambda-Extension-Name"
# Returned on registration; required on every later call
EXTENSION_ID_HEADER = "Lambda-Extension-Identifier"
# Error category for init/exit error reports
EXTENSION_ERROR_TYPE_HEADER = "Lambda-Extension-Function-Error-Type"

# Error reports must not hold up a fatal exit
ERROR_REPORT_TIMEOUT = httpx.Timeout(2.0)


class IExtensionClient(Protocol):
    """Control-plane access for one extension process."""

    async def register(self, context: Context | None = None) -> Registration:
        """Register with the Extensions API. Once per process."""
        ...

    async def next_event(self, context: Context | None = None) -> LifecycleEvent:
        """Block until the platform dispatches the next lifecycle event."""
        ...

    async def report_exit_error(
        self, error_type: str, message: str, context: Context | None = None
    ) -> None:
        """Report a fatal error before the extension exits."""
        ...

    async def aclose(self) -> None:
        """Release the underlying HTTP client."""
        ...


class ExtensionClient:
    """Lambda Extensions API client.

    The HTTP client runs without a timeout: the next-event call legitimately
    blocks from seconds up to the platform's idle-eviction window.
    """

    def __init__(
        self,
        runtime_api: str | None,
        extension_name: str = DEFAULT_EXTENSION_NAME,
        events: Sequence[str] = (EventKind.INVOKE.value,),
        http_client: httpx.AsyncClient | None = None,
    ):
        if not extension_name:
            raise ValueError("Extension name cannot be empty")

        self._runtime_api = runtime_api
        self._events = list(events)
        self._registration = Registration(extension_name=extension_name)
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(None))
        self._base_url: str | None = None
        self._register_attempted = False

    @property
    def registration(self) -> Registration:
        return self._registration

    @property
    def id(self) -> str | None:
        """Identifier assigned by the Extensions API, None until registered."""
        return self._registration.id

    async def register(self, context: Context | None = None) -> Registration:
        """Register this extension for the configured lifecycle events."""
        if self._register_attempted:
            raise RegistrationError("Extension registration already attempted")
        self._register_attempted = True

        self._base_url = resolve_runtime_api(self._runtime_api)
        url = f"{self._base_url}/register"
        body = RegisterRequest(events=self._events)

        with use_context(context or instrumentation_exempt_context()):
            try:
                response = await self._client.post(
                    url,
                    json=body.model_dump(),
                    headers={EXTENSION_NAME_HEADER: self._registration.extension_name},
                )
            except httpx.HTTPError as e:
                raise RegistrationError(f"Registration request failed: {e}") from e

        if not response.is_success:
            logger.error(
                "Error response received for registration request: %s",
                response.text,
                extra={"context": {"status_code": response.status_code}},
            )
            raise RegistrationError(
                f"Registration failed with status {response.status_code}"
            )

        extension_id = response.headers.get(EXTENSION_ID_HEADER)
        if not extension_id:
            raise RegistrationError(
                "Extension API register call didn't return a valid identifier"
            )

        self._registration.id = extension_id
        self._apply_function_metadata(response)

        logger.info(
            "Extension registered",
            extra={
                "context": {
                    "extension_name": self._registration.extension_name,
                    "function_name": self._registration.function_name,
                    "events": self._events,
                }
            },
        )
        return self._registration

    def _apply_function_metadata(self, response: httpx.Response) -> None:
        """Copy function metadata from the register response, if any."""
        if not response.content:
            return
        try:
            metadata = RegisterResponse.model_validate_json(response.content)
        except ValidationError:
            logger.warning("Registration response body is not valid function metadata")
            return

        self._registration.function_name = metadata.function_name
        self._registration.function_version = metadata.function_version
        self._registration.handler = metadata.handler

    def _require_registration(self) -> tuple[str, dict[str, str]]:
        if not self._registration.is_registered or self._base_url is None:
            raise RuntimeError("Extension not registered")
        return self._base_url, {EXTENSION_ID_HEADER: self._registration.id}

    async def next_event(self, context: Context | None = None) -> LifecycleEvent:
        """Long-poll for the next lifecycle event."""
        base_url, headers = self._require_registration()
        url = f"{base_url}/event/next"

        with use_context(context or instrumentation_exempt_context()):
            try:
                response = await self._client.get(url, headers=headers)
            except httpx.HTTPError as e:
                raise PollError(f"Next event request failed: {e}") from e

        if not response.is_success:
            logger.error(
                "Error response received for %s: %s",
                response.url.path,
                response.text,
                extra={"context": {"status_code": response.status_code}},
            )
            raise PollError(f"Next event failed with status {response.status_code}")

        event = self._decode_event(response.content)
        logger.debug(
            "Received event",
            extra={"context": {"event_type": event.kind.value, "request_id": event.request_id}},
        )
        return event

    @staticmethod
    def _decode_event(payload: bytes) -> LifecycleEvent:
        try:
            body = NextEventResponse.model_validate_json(payload)
        except ValidationError as e:
            raise PollError(f"Undecodable next event body: {e}") from e

        try:
            kind = EventKind(body.event_type)
        except ValueError as e:
            raise PollError(f"Unknown event type: {body.event_type}") from e

        return LifecycleEvent(
            kind=kind,
            raw_payload=payload,
            request_id=body.request_id,
            deadline_ms=body.deadline_ms,
            invoked_function_arn=body.invoked_function_arn,
            shutdown_reason=body.shutdown_reason,
        )

    async def report_init_error(
        self, error_type: str, message: str, context: Context | None = None
    ) -> None:
        """Report a failure during initialization."""
        await self._report_error("init/error", error_type, message, context)

    async def report_exit_error(
        self, error_type: str, message: str, context: Context | None = None
    ) -> None:
        """Report a fatal error before the extension exits."""
        await self._report_error("exit/error", error_type, message, context)

    async def _report_error(
        self,
        endpoint: str,
        error_type: str,
        message: str,
        context: Context | None,
    ) -> None:
        base_url, headers = self._require_registration()
        headers[EXTENSION_ERROR_TYPE_HEADER] = error_type
        body = ErrorReport(error_message=message, error_type=error_type)

        with use_context(context or instrumentation_exempt_context()):
            try:
                response = await self._client.post(
                    f"{base_url}/{endpoint}",
                    json=body.model_dump(by_alias=True),
                    headers=headers,
                    timeout=ERROR_REPORT_TIMEOUT,
                )
            except httpx.HTTPError as e:
                raise ExtensionError(f"Error report to {endpoint} failed: {e}") from e

        if not response.is_success:
            raise ExtensionError(
                f"Error report to {endpoint} failed with status {response.status_code}"
            )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
