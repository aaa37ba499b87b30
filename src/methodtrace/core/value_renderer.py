"""
Value Renderer for Method Trace

Turns an arbitrary return value into a ``(type_name, representation)`` pair
for the after-line of a trace. Rendering never raises: anything that goes
wrong while inspecting a value is reported as ``<unrenderable>``.
"""

import json
import logging
from typing import Any, Optional, Set, Tuple

from ..config import Config
from ..errors import RenderError

logger = logging.getLogger(__name__)

UNRENDERABLE = "<unrenderable>"
RECURSION_MARKER = "..."

TYPE_LABELS = {
    str: "string",
    bool: "boolean",
    int: "integer",
    float: "float",
    type(None): "null",
    bytes: "bytes",
    dict: "dict",
    list: "list",
    tuple: "tuple",
    set: "set",
    frozenset: "frozenset",
}


class ValueRenderer:
    """Debug-style renderer with length truncation."""

    def __init__(self, max_length: Optional[int] = None):
        self.max_length = max_length

    def render(self, value: Any) -> Tuple[str, str]:
        """Return the type label and representation of ``value``."""
        type_name = "object"
        try:
            type_name = self.type_name(value)
            representation = self._truncate(self._render_value(value, set()))
        except Exception as e:
            logger.debug("Could not render %s value: %r", type_name, e)
            return type_name, UNRENDERABLE
        return type_name, representation

    def type_name(self, value: Any) -> str:
        """Human-readable label for the runtime type of ``value``."""
        value_type = type(value)
        label = TYPE_LABELS.get(value_type)
        if label is not None:
            return label
        return getattr(value_type, "__qualname__", value_type.__name__)

    def _render_value(self, value: Any, seen: Set[int]) -> str:
        if value is None:
            return "null"
        if value is True:
            return "true"
        if value is False:
            return "false"
        if isinstance(value, str):
            return json.dumps(value, ensure_ascii=False)
        if type(value) in (int, float):
            return repr(value)

        if isinstance(value, (dict, list, tuple, set, frozenset)):
            marker = id(value)
            if marker in seen:
                return RECURSION_MARKER
            seen.add(marker)
            try:
                return self._render_container(value, seen)
            finally:
                seen.discard(marker)

        return self._render_repr(value)

    def _render_container(self, value: Any, seen: Set[int]) -> str:
        if isinstance(value, dict):
            items = ", ".join(
                f"{self._render_value(k, seen)}: {self._render_value(v, seen)}"
                for k, v in value.items()
            )
            return "{" + items + "}"

        items = ", ".join(self._render_value(item, seen) for item in value)
        if isinstance(value, list):
            return "[" + items + "]"
        if isinstance(value, tuple):
            if len(value) == 1:
                items += ","
            return "(" + items + ")"
        # set / frozenset
        if not value:
            return f"{type(value).__name__}()"
        return "{" + items + "}"

    def _render_repr(self, value: Any) -> str:
        try:
            return repr(value)
        except Exception as e:
            raise RenderError(f"repr() failed for {type(value).__qualname__}: {e}") from e

    def _truncate(self, text: str) -> str:
        """Truncate long values."""
        limit = self.max_length
        if limit is None:
            limit = Config.get("max_repr_length", 1000)
        if len(text) > limit:
            return text[:limit] + "..."
        return text


_default_renderer = ValueRenderer()


def render(value: Any) -> Tuple[str, str]:
    """Render ``value`` with the default renderer."""
    return _default_renderer.render(value)
