"""Lambda telemetry flush extension."""

from .app import ILambdaExtension, LambdaExtension, add_lambda_extension
from .config import ExtensionSettings
from .coordinator import CoordinatorState, FlushCoordinator, IFlushCoordinator
from .errors import ExtensionError, FlushError, PollError, RegistrationError
from .extension_api import ExtensionClient, IExtensionClient
from .models import EventKind, FinishedSpan, LifecycleEvent, Registration
from .telemetry import (
    ExportPipeline,
    HandoffQueue,
    IExportPipeline,
    ISpanQueue,
    SpanObserver,
)

__all__ = [
    # Bootstrap
    "LambdaExtension",
    "ILambdaExtension",
    "add_lambda_extension",
    "ExtensionSettings",
    # Models
    "Registration",
    "EventKind",
    "LifecycleEvent",
    "FinishedSpan",
    # Errors
    "ExtensionError",
    "RegistrationError",
    "PollError",
    "FlushError",
    # Components
    "ExtensionClient",
    "IExtensionClient",
    "HandoffQueue",
    "ISpanQueue",
    "SpanObserver",
    "ExportPipeline",
    "IExportPipeline",
    "FlushCoordinator",
    "IFlushCoordinator",
    "CoordinatorState",
]
