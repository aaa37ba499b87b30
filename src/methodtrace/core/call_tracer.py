"""
Call Tracer for Method Trace

This module wraps callables so every invocation prints a before-line naming
the operation and its declaration site, and an after-line with the type and
representation of the returned value.
"""

import functools
import inspect
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import IO, Any, Callable, Dict, List, Optional

import click

from ..errors import WrapError
from .value_renderer import ValueRenderer

logger = logging.getLogger(__name__)

BEFORE_MARKER = "*"
AFTER_MARKER = "↳"
TRACED_ATTRIBUTE = "__traced_operation__"


@dataclass(frozen=True)
class SourceLocation:
    """Where an operation was declared, as far as introspection can tell."""

    file: Optional[str] = None
    line: Optional[int] = None

    @classmethod
    def of(cls, func: Callable) -> "SourceLocation":
        """Introspect the declaration site of ``func``."""
        try:
            target = inspect.unwrap(func)
            source_file = inspect.getsourcefile(target) or inspect.getfile(target)
        except (TypeError, OSError, ValueError):
            # builtins and C extensions
            return cls()

        code = getattr(target, "__code__", None)
        line = code.co_firstlineno if code is not None else None
        return cls(file=source_file, line=line)

    @property
    def known(self) -> bool:
        return self.file is not None

    def __str__(self) -> str:
        if self.file is None:
            return "unknown"
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class TracedOperation:
    """Metadata for one wrapped operation."""

    name: str
    owner: str
    location: SourceLocation
    original: Callable = field(compare=False, repr=False)
    kind: str = "function"

    @property
    def qualified_name(self) -> str:
        return f"{self.owner}#{self.name}"


@dataclass
class InvocationRecord:
    """What happened during a single traced call."""

    operation: TracedOperation
    args: tuple
    kwargs: Dict[str, Any]
    result: Any = None
    error: Optional[BaseException] = None
    elapsed: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None


class CallTracer:
    """Produces tracing proxies around callables."""

    def __init__(self, renderer: Optional[ValueRenderer] = None, stream: Optional[IO[str]] = None):
        self.renderer = renderer or ValueRenderer()
        self.stream = stream
        self._listeners: List[Callable[[InvocationRecord], None]] = []
        self._lock = threading.RLock()

    def wrap(self, operation: TracedOperation, target: Callable) -> Callable:
        """Return a proxy that traces each call of ``target``."""
        if not operation.name or not operation.owner:
            raise WrapError(
                f"Incomplete operation metadata: {operation!r}", name=operation.name
            )
        if not callable(target):
            raise WrapError(
                f"{operation.qualified_name} is not callable: {target!r}", name=operation.name
            )

        if inspect.iscoroutinefunction(target):

            @functools.wraps(target)
            async def async_proxy(*args, **kwargs):
                self._before(operation)
                start_time = time.perf_counter()
                try:
                    result = await target(*args, **kwargs)
                except BaseException as e:
                    self._notify(operation, args, kwargs, None, e, time.perf_counter() - start_time)
                    raise
                elapsed = time.perf_counter() - start_time
                self._after(result)
                self._notify(operation, args, kwargs, result, None, elapsed)
                return result

            proxy = async_proxy
        else:

            @functools.wraps(target)
            def sync_proxy(*args, **kwargs):
                self._before(operation)
                start_time = time.perf_counter()
                try:
                    result = target(*args, **kwargs)
                except BaseException as e:
                    self._notify(operation, args, kwargs, None, e, time.perf_counter() - start_time)
                    raise
                elapsed = time.perf_counter() - start_time
                self._after(result)
                self._notify(operation, args, kwargs, result, None, elapsed)
                return result

            proxy = sync_proxy

        setattr(proxy, TRACED_ATTRIBUTE, operation)
        logger.debug("Wrapped %s (%s)", operation.qualified_name, operation.location)
        return proxy

    def format_before(self, operation: TracedOperation) -> str:
        return f"{BEFORE_MARKER} {operation.qualified_name} ({operation.location})"

    def format_after(self, value: Any) -> str:
        type_name, representation = self.renderer.render(value)
        return f"{AFTER_MARKER} {type_name}: {representation}"

    def _before(self, operation: TracedOperation):
        self._write(self.format_before(operation))

    def _after(self, value: Any):
        self._write(self.format_after(value))

    def _write(self, line: str):
        # click.echo resolves sys.stdout at call time and flushes after each line
        try:
            click.echo(line, file=self.stream)
        except (OSError, ValueError) as e:
            logger.warning("Could not write trace line %r: %s", line, e)

    def _notify(self, operation, args, kwargs, result, error, elapsed):
        """Hand the invocation record to listeners."""
        with self._lock:
            listeners = list(self._listeners)
        if not listeners:
            return

        record = InvocationRecord(
            operation=operation,
            args=args,
            kwargs=kwargs,
            result=result,
            error=error,
            elapsed=elapsed,
        )
        for listener in listeners:
            try:
                listener(record)
            except Exception:
                logger.exception("Trace listener %r failed for %s", listener, operation.qualified_name)

    def subscribe(self, callback: Callable[[InvocationRecord], None]):
        """Receive an InvocationRecord after every traced call."""
        with self._lock:
            if callback not in self._listeners:
                self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[InvocationRecord], None]):
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)


def get_traced_operation(func: Any) -> Optional[TracedOperation]:
    """The TracedOperation attached to a proxy, or None for plain callables."""
    if isinstance(func, (staticmethod, classmethod)):
        func = func.__func__
    operation = getattr(func, TRACED_ATTRIBUTE, None)
    return operation if isinstance(operation, TracedOperation) else None
