"""Extension error taxonomy."""


class ExtensionError(Exception):
    """Base class for all extension failures."""


class RegistrationError(ExtensionError):
    """Registration with the Extensions API failed. Fatal at startup."""


class PollError(ExtensionError):
    """Long-poll for the next lifecycle event failed. Fatal for the loop."""


class FlushError(ExtensionError):
    """Forced flush of the export pipeline failed. Logged, loop continues."""
