"""Main entry point for the Lambda flush extension sample."""

import os
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from lambda_flusher import ExtensionSettings, add_lambda_extension
from lambda_flusher.logging_config import get_logger, setup_logging
from sample import create_sample_app

logger = get_logger(__name__)


def create_tracer_provider() -> TracerProvider:
    """SDK provider exporting over OTLP/HTTP (endpoint from OTEL_* env vars)."""
    resource = Resource.create(
        {SERVICE_NAME: os.getenv("OTEL_SERVICE_NAME", "lambda-flusher-sample")}
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
    trace.set_tracer_provider(provider)
    return provider


def main() -> int:
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()

    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", "8000"))

    provider = create_tracer_provider()
    fatal_errors: list[BaseException] = []
    server: uvicorn.Server | None = None

    def on_fatal(error: BaseException) -> None:
        # An extension that lost its contract with the platform must exit
        fatal_errors.append(error)
        if server is not None:
            server.should_exit = True

    extension = add_lambda_extension(
        provider,
        settings=ExtensionSettings.from_env(),
        on_fatal=on_fatal,
    )
    app = create_sample_app(provider, extension)

    server = uvicorn.Server(
        uvicorn.Config(app, host=api_host, port=api_port, log_level="info")
    )
    server.run()
    provider.shutdown()

    if fatal_errors:
        logger.critical("Exiting on fatal extension error: %s", fatal_errors[0])
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
