"""
Error types for Method Trace.

Errors raised by traced operations themselves are never wrapped in these
types; they reach the caller unchanged.
"""


class TraceError(Exception):
    """Base class for all tracer errors."""


class WrapError(TraceError):
    """An operation could not be wrapped (missing, not callable, or incomplete)."""

    def __init__(self, message: str, entity=None, name=None):
        super().__init__(message)
        self.entity = entity
        self.name = name


class RenderError(TraceError):
    """A value could not be rendered. Recovered inside the renderer."""
