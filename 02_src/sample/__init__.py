"""Sample function app."""

from .app import create_sample_app

__all__ = ["create_sample_app"]
