"""Extension registration model."""

from dataclasses import dataclass


@dataclass
class Registration:
    """Result of the one-time handshake with the Extensions API."""

    extension_name: str
    id: str | None = None  # set once the handshake succeeds
    function_name: str | None = None
    function_version: str | None = None
    handler: str | None = None

    @property
    def is_registered(self) -> bool:
        return bool(self.id)
