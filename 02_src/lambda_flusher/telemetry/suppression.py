"""Instrumentation-exempt OpenTelemetry context.

Calls the extension makes to the control plane and the flush itself are
infrastructure, not user telemetry. They run in a context carrying the
suppress-instrumentation flag, which every OpenTelemetry instrumentation
checks before recording a span. The context is built explicitly and handed
down to each call instead of toggling a process-wide flag.
"""

from contextlib import contextmanager
from typing import Iterator

from opentelemetry.context import (
    _SUPPRESS_INSTRUMENTATION_KEY,
    Context,
    attach,
    detach,
    get_value,
    set_value,
)


def instrumentation_exempt_context(parent: Context | None = None) -> Context:
    """Return a copy of ``parent`` (or the current context) with instrumentation suppressed."""
    return set_value(_SUPPRESS_INSTRUMENTATION_KEY, True, parent)


def is_instrumentation_exempt(context: Context | None = None) -> bool:
    """Check whether instrumentation is suppressed in ``context`` (or the current one)."""
    return bool(get_value(_SUPPRESS_INSTRUMENTATION_KEY, context))


@contextmanager
def use_context(context: Context) -> Iterator[Context]:
    """Make ``context`` current for the duration of the block."""
    token = attach(context)
    try:
        yield context
    finally:
        detach(token)
