"""Background task dispatch."""

from .dispatcher import BackgroundDispatcher, DispatcherShutdownError

__all__ = ["BackgroundDispatcher", "DispatcherShutdownError"]
