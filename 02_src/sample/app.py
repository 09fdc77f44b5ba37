"""Sample function app wired to the flush extension."""

import asyncio

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.trace import TracerProvider

from lambda_flusher.api import lambda_extension_lifespan
from lambda_flusher.app import ILambdaExtension

WELCOME_TEXT = "Welcome to running FastAPI on AWS Lambda"


def create_sample_app(
    tracer_provider: TracerProvider,
    extension: ILambdaExtension,
    response_delay: float = 1.0,
) -> FastAPI:
    """Create the sample app with inbound request instrumentation."""
    app = FastAPI(
        title="Lambda Flusher Sample",
        description="Sample function whose spans are flushed after every invocation",
        version="0.1.0",
        lifespan=lambda_extension_lifespan(extension),
    )

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Simulate work, then greet."""
        await asyncio.sleep(response_delay)
        return WELCOME_TEXT

    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)
    return app
