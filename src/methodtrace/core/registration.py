"""
Trace Registration for Method Trace

Installs call tracers on named operations of classes, modules and object
instances. Installation is explicit and idempotent: every (entity, name)
pair is wrapped at most once, and wrapping can be undone.
"""

import inspect
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from ..config import Config, TraceConfig
from ..errors import WrapError
from .call_tracer import CallTracer, SourceLocation, TracedOperation, get_traced_operation

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class _Lookup:
    """Result of resolving an operation name on an entity."""

    raw: Any
    target: Callable
    owner: str
    kind: str
    own: bool

    def rebind(self, proxy: Callable) -> Any:
        """Package the proxy so it binds the same way as the original."""
        if self.kind == "staticmethod":
            return staticmethod(proxy)
        if self.kind == "classmethod":
            return classmethod(proxy)
        return proxy


@dataclass
class _Installation:
    operation: TracedOperation
    entity: Any
    raw: Any
    own: bool


def describe_entity(entity: Any) -> str:
    """Display label used as the owner part of a trace line."""
    if inspect.ismodule(entity):
        return entity.__name__
    if inspect.isclass(entity):
        return entity.__qualname__
    return type(entity).__qualname__


def _is_operation(raw: Any) -> bool:
    return isinstance(raw, (staticmethod, classmethod)) or inspect.isfunction(raw)


class TraceRegistry:
    """Registry of traced operations, keyed by entity and operation name."""

    def __init__(self, tracer: Optional[CallTracer] = None, config: Optional[TraceConfig] = None):
        self.tracer = tracer or CallTracer()
        self.config = config
        self._installed: Dict[Tuple[int, str], _Installation] = {}
        self._installing: Set[Tuple[int, str]] = set()
        self._decorated: List[TracedOperation] = []
        self._lock = threading.RLock()

    @staticmethod
    def _key(entity: Any, name: str) -> Tuple[int, str]:
        # entity is kept alive by the _Installation, so its id stays unique
        return (id(entity), name)

    def install(self, entity: Any, operation_names: Iterable[str]) -> List[TracedOperation]:
        """
        Wrap the named operations of ``entity`` with the call tracer.

        Names that are already traced are skipped. Every name is resolved
        before anything is rebound, so a missing or non-callable name raises
        WrapError and leaves the entity untouched.

        Returns:
            The TracedOperation records created by this call.
        """
        if isinstance(operation_names, str):
            operation_names = [operation_names]
        names = list(dict.fromkeys(operation_names))

        if not Config.is_enabled(self.config):
            logger.info("Tracing disabled, not installing %s on %s", names, describe_entity(entity))
            return []

        with self._lock:
            pending = []
            for name in names:
                key = self._key(entity, name)
                if key in self._installed or key in self._installing:
                    continue

                lookup = self._lookup(entity, name)
                if get_traced_operation(lookup.raw) is not None:
                    logger.debug("%s.%s is already traced", describe_entity(entity), name)
                    continue
                pending.append((key, name, lookup))

            created: List[TracedOperation] = []
            for key, name, lookup in pending:
                self._installing.add(key)
                try:
                    operation = TracedOperation(
                        name=name,
                        owner=lookup.owner,
                        location=SourceLocation.of(lookup.target),
                        original=lookup.target,
                        kind=lookup.kind,
                    )
                    proxy = self.tracer.wrap(operation, lookup.target)
                    try:
                        setattr(entity, name, lookup.rebind(proxy))
                    except (AttributeError, TypeError) as e:
                        self._rollback(entity, created)
                        raise WrapError(
                            f"Cannot rebind {describe_entity(entity)}.{name}: {e}",
                            entity=entity,
                            name=name,
                        ) from e

                    self._installed[key] = _Installation(
                        operation=operation, entity=entity, raw=lookup.raw, own=lookup.own
                    )
                    created.append(operation)
                    logger.debug("Installed tracer on %s", operation.qualified_name)
                finally:
                    self._installing.discard(key)

            return created

    def _lookup(self, entity: Any, name: str) -> _Lookup:
        """Resolve ``name`` on ``entity`` without triggering descriptors."""
        label = describe_entity(entity)

        if inspect.ismodule(entity):
            raw = vars(entity).get(name, _MISSING)
            if raw is _MISSING:
                raise WrapError(f"Module {label} has no attribute {name!r}", entity=entity, name=name)
            if not callable(raw) or inspect.isclass(raw):
                raise WrapError(f"{label}.{name} is not a function", entity=entity, name=name)
            return _Lookup(raw=raw, target=raw, owner=label, kind="function", own=True)

        if inspect.isclass(entity):
            for klass in entity.__mro__:
                if name in vars(klass):
                    return self._class_lookup(entity, klass, name, vars(klass)[name])
            raise WrapError(f"{label} has no operation {name!r}", entity=entity, name=name)

        # plain object instance
        if not hasattr(entity, "__dict__"):
            raise WrapError(
                f"{label} instances have no __dict__, trace the class instead",
                entity=entity,
                name=name,
            )
        own = name in vars(entity)
        target = getattr(entity, name, _MISSING)
        if target is _MISSING:
            raise WrapError(f"{label} object has no operation {name!r}", entity=entity, name=name)
        if not callable(target) or inspect.isclass(target):
            raise WrapError(f"{label}.{name} is not callable", entity=entity, name=name)

        owner = label
        if not own:
            for klass in type(entity).__mro__:
                if name in vars(klass):
                    owner = klass.__qualname__
                    break
        raw = vars(entity)[name] if own else target
        return _Lookup(raw=raw, target=target, owner=owner, kind="function", own=own)

    def _class_lookup(self, entity: type, klass: type, name: str, raw: Any) -> _Lookup:
        own = klass is entity
        owner = klass.__qualname__
        if isinstance(raw, staticmethod):
            return _Lookup(raw=raw, target=raw.__func__, owner=owner, kind="staticmethod", own=own)
        if isinstance(raw, classmethod):
            return _Lookup(raw=raw, target=raw.__func__, owner=owner, kind="classmethod", own=own)
        if callable(raw) and not inspect.isclass(raw):
            # functions and method descriptors bind to instances, plain callables do not
            kind = "function" if hasattr(type(raw), "__get__") else "staticmethod"
            return _Lookup(raw=raw, target=raw, owner=owner, kind=kind, own=own)
        raise WrapError(
            f"{owner}.{name} is not an operation ({type(raw).__name__})",
            entity=entity,
            name=name,
        )

    def _restore(self, installation: _Installation):
        entity = installation.entity
        name = installation.operation.name
        key = self._key(entity, name)
        self._installing.add(key)
        try:
            if installation.own:
                setattr(entity, name, installation.raw)
            else:
                delattr(entity, name)
        finally:
            self._installing.discard(key)

    def _rollback(self, entity: Any, operations: List[TracedOperation]):
        for operation in operations:
            installation = self._installed.pop(self._key(entity, operation.name), None)
            if installation:
                self._restore(installation)

    def uninstall(self, entity: Any, operation_names: Optional[Iterable[str]] = None) -> List[str]:
        """Restore the original bindings and return the names that were restored."""
        if isinstance(operation_names, str):
            operation_names = [operation_names]

        with self._lock:
            if operation_names is None:
                operation_names = [
                    inst.operation.name
                    for inst in self._installed.values()
                    if inst.entity is entity
                ]

            restored = []
            for name in operation_names:
                installation = self._installed.pop(self._key(entity, name), None)
                if installation is None:
                    continue
                self._restore(installation)
                restored.append(name)
                logger.debug("Removed tracer from %s", installation.operation.qualified_name)
            return restored

    def install_all(self, entity: Any, include_inherited: bool = False) -> List[TracedOperation]:
        """Trace every public operation defined on ``entity``."""
        return self.install(entity, self._public_names(entity, include_inherited))

    def _public_names(self, entity: Any, include_inherited: bool) -> List[str]:
        if inspect.ismodule(entity):
            return [
                name
                for name, value in vars(entity).items()
                if not name.startswith("_")
                and inspect.isfunction(value)
                and value.__module__ == entity.__name__
            ]

        cls = entity if inspect.isclass(entity) else type(entity)
        classes = [c for c in cls.__mro__ if c is not object] if include_inherited else [cls]
        names: List[str] = []
        for klass in classes:
            for name, raw in vars(klass).items():
                if not name.startswith("_") and _is_operation(raw) and name not in names:
                    names.append(name)
        return names

    def trace(self, func: Callable, owner: Optional[str] = None) -> Callable:
        """Wrap a plain function at definition time."""
        if not Config.is_enabled(self.config):
            return func
        if get_traced_operation(func) is not None:
            return func

        # "Example.foo" -> owner "Example"; functions nested in functions keep the module
        name = func.__name__
        default_owner = func.__module__
        parent, _, _ = func.__qualname__.rpartition(".")
        if parent and not parent.endswith("<locals>"):
            default_owner = parent

        operation = TracedOperation(
            name=name,
            owner=owner or default_owner,
            location=SourceLocation.of(func),
            original=func,
        )
        proxy = self.tracer.wrap(operation, func)
        with self._lock:
            self._decorated.append(operation)
        return proxy

    def is_traced(self, entity: Any, name: str) -> bool:
        with self._lock:
            return self._key(entity, name) in self._installed

    def get_operation(self, entity: Any, name: str) -> Optional[TracedOperation]:
        with self._lock:
            installation = self._installed.get(self._key(entity, name))
            return installation.operation if installation else None

    def operations(self, entity: Any = None) -> List[TracedOperation]:
        """Traced operations, optionally limited to one entity."""
        with self._lock:
            installed = [
                inst.operation
                for inst in self._installed.values()
                if entity is None or inst.entity is entity
            ]
            if entity is None:
                installed.extend(self._decorated)
            return installed

    def clear(self):
        """Uninstall everything this registry installed."""
        with self._lock:
            for installation in list(self._installed.values()):
                self._restore(installation)
            self._installed.clear()
            self._decorated.clear()


_default_registry = TraceRegistry()


def get_registry() -> TraceRegistry:
    """The process-wide default registry."""
    return _default_registry


def install(entity: Any, operation_names: Iterable[str]) -> List[TracedOperation]:
    return _default_registry.install(entity, operation_names)


def uninstall(entity: Any, operation_names: Optional[Iterable[str]] = None) -> List[str]:
    return _default_registry.uninstall(entity, operation_names)


def install_all(entity: Any, include_inherited: bool = False) -> List[TracedOperation]:
    return _default_registry.install_all(entity, include_inherited)


def is_traced(entity: Any, name: str) -> bool:
    return _default_registry.is_traced(entity, name)


def trace(func: Optional[Callable] = None, *, owner: Optional[str] = None, registry=None):
    """
    Decorator that traces a function.

    Example:
        @trace
        def load(path):
            ...

        @trace(owner="storage")
        def save(path, data):
            ...
    """
    target_registry = registry or _default_registry

    def decorator(f):
        return target_registry.trace(f, owner=owner)

    if func is not None:
        return decorator(func)
    return decorator


def traced_class(cls: Optional[type] = None, *, include_inherited: bool = False, registry=None):
    """Class decorator that traces every public operation of the class."""
    target_registry = registry or _default_registry

    def decorator(klass):
        target_registry.install_all(klass, include_inherited=include_inherited)
        return klass

    if cls is not None:
        return decorator(cls)
    return decorator
