"""Web framework integration."""

from .lifespan import lambda_extension_lifespan

__all__ = ["lambda_extension_lifespan"]
