"""Extension configuration and environment helpers."""

import os
from dataclasses import dataclass, field

import httpx

from .errors import RegistrationError
from .logging_config import get_logger

logger = get_logger(__name__)

RUNTIME_API_ENV = "AWS_LAMBDA_RUNTIME_API"
EXTENSION_NAME_ENV = "LAMBDA_EXTENSION_NAME"
OBSERVED_SOURCES_ENV = "LAMBDA_FLUSHER_SOURCES"
FLUSH_TIMEOUT_ENV = "LAMBDA_FLUSHER_FLUSH_TIMEOUT_MS"

EXTENSION_API_VERSION = "2020-01-01"
DEFAULT_EXTENSION_NAME = "otel-lambda-flusher"
DEFAULT_FLUSH_TIMEOUT_MILLIS = 30000

# Scopes that record inbound request handling
DEFAULT_OBSERVED_SOURCES = frozenset(
    {
        "opentelemetry.instrumentation.fastapi",
        "opentelemetry.instrumentation.asgi",
    }
)
ALL_SOURCES = "*"


def resolve_runtime_api(env_value: str | None) -> str:
    """Build the Extensions API base URL from a ``host:port`` value."""
    if not env_value or not env_value.strip():
        raise RegistrationError(f"{RUNTIME_API_ENV} environment variable not set")

    candidate = env_value.strip()
    if "://" not in candidate:
        candidate = f"http://{candidate}"

    try:
        url = httpx.URL(candidate)
    except httpx.InvalidURL as e:
        raise RegistrationError(
            f"Malformed {RUNTIME_API_ENV} value: {env_value!r}"
        ) from e

    if url.scheme != "http" or not url.host or url.path not in ("", "/"):
        raise RegistrationError(f"Malformed {RUNTIME_API_ENV} value: {env_value!r}")

    netloc = url.host if url.port is None else f"{url.host}:{url.port}"
    return f"http://{netloc}/{EXTENSION_API_VERSION}/extension"


def parse_sources(value: str | None) -> frozenset[str]:
    """Parse a comma-separated list of instrumentation scope names."""
    if not value or not value.strip():
        return DEFAULT_OBSERVED_SOURCES
    return frozenset(part.strip() for part in value.split(",") if part.strip())


def parse_flush_timeout(value: str | None) -> int:
    """Parse a positive flush timeout in milliseconds, falling back to the default."""
    if not value or not value.strip():
        return DEFAULT_FLUSH_TIMEOUT_MILLIS
    try:
        timeout = int(value.strip())
    except ValueError:
        timeout = 0
    if timeout <= 0:
        logger.warning(
            "Invalid %s value %r, using %s ms",
            FLUSH_TIMEOUT_ENV,
            value,
            DEFAULT_FLUSH_TIMEOUT_MILLIS,
        )
        return DEFAULT_FLUSH_TIMEOUT_MILLIS
    return timeout


@dataclass
class ExtensionSettings:
    """Runtime settings for the extension."""

    runtime_api: str | None
    extension_name: str = DEFAULT_EXTENSION_NAME
    observed_sources: frozenset[str] = field(
        default_factory=lambda: DEFAULT_OBSERVED_SOURCES
    )
    flush_timeout_millis: int = DEFAULT_FLUSH_TIMEOUT_MILLIS
    events: tuple[str, ...] = ("INVOKE",)

    @classmethod
    def from_env(cls) -> "ExtensionSettings":
        """Read settings from process environment."""
        return cls(
            runtime_api=os.getenv(RUNTIME_API_ENV),
            extension_name=os.getenv(EXTENSION_NAME_ENV, DEFAULT_EXTENSION_NAME),
            observed_sources=parse_sources(os.getenv(OBSERVED_SOURCES_ENV)),
            flush_timeout_millis=parse_flush_timeout(os.getenv(FLUSH_TIMEOUT_ENV)),
        )
