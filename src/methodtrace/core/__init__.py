"""
Core functionality package for Method Trace.

This package contains the value renderer, the call tracer and the
registration shim that installs tracers on classes, modules and objects.
"""

from .call_tracer import CallTracer, InvocationRecord, SourceLocation, TracedOperation
from .registration import TraceRegistry
from .value_renderer import ValueRenderer, render

__all__ = [
    "CallTracer",
    "InvocationRecord",
    "SourceLocation",
    "TracedOperation",
    "TraceRegistry",
    "ValueRenderer",
    "render",
]
