"""FastAPI lifespan integration."""

from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import FastAPI

from ..app import ILambdaExtension

Lifespan = Callable[[FastAPI], AbstractAsyncContextManager[None]]


def lambda_extension_lifespan(extension: ILambdaExtension) -> Lifespan:
    """Start ``extension`` with the app and stop it on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await extension.start()
        try:
            yield
        finally:
            await extension.stop()

    return lifespan
