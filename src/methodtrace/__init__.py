"""
Method Trace - before/after call tracing for Python operations

Wraps named functions and methods so each call prints where the operation was
declared and what it returned.
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

# Configuration
from .config import Config, TraceConfig, get_config, load_config
from .core.call_tracer import (
    CallTracer,
    InvocationRecord,
    SourceLocation,
    TracedOperation,
    get_traced_operation,
)
from .core.registration import (
    TraceRegistry,
    get_registry,
    install,
    install_all,
    is_traced,
    trace,
    traced_class,
    uninstall,
)
from .core.value_renderer import ValueRenderer, render
from .errors import RenderError, TraceError, WrapError

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Rendering
    "render",
    "ValueRenderer",
    # Tracing
    "CallTracer",
    "TracedOperation",
    "InvocationRecord",
    "SourceLocation",
    "get_traced_operation",
    # Registration
    "TraceRegistry",
    "get_registry",
    "install",
    "install_all",
    "uninstall",
    "is_traced",
    "trace",
    "traced_class",
    # Errors
    "TraceError",
    "WrapError",
    "RenderError",
    # Configuration
    "Config",
    "TraceConfig",
    "load_config",
    "get_config",
]
