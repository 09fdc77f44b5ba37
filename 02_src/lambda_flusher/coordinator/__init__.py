"""Flush coordinator."""

from .coordinator import CoordinatorState, FlushCoordinator, IFlushCoordinator

__all__ = ["CoordinatorState", "FlushCoordinator", "IFlushCoordinator"]
