"""Lambda Extensions API access."""

from .client import (
    EXTENSION_ERROR_TYPE_HEADER,
    EXTENSION_ID_HEADER,
    EXTENSION_NAME_HEADER,
    ExtensionClient,
    IExtensionClient,
)

__all__ = [
    "ExtensionClient",
    "IExtensionClient",
    "EXTENSION_NAME_HEADER",
    "EXTENSION_ID_HEADER",
    "EXTENSION_ERROR_TYPE_HEADER",
]
