"""Unit tests for the value renderer."""

from collections import OrderedDict

import pytest

from methodtrace import Config
from methodtrace.core.value_renderer import UNRENDERABLE, ValueRenderer, render


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def __repr__(self):
        return f"Point({self.x}, {self.y})"


class BrokenRepr:
    def __repr__(self):
        raise RuntimeError("no repr for you")


class TestTypeNames:
    """Test the type labels."""

    @pytest.mark.parametrize(
        "value,label",
        [
            ("foo", "string"),
            (True, "boolean"),
            (3, "integer"),
            (1.5, "float"),
            (None, "null"),
            (b"raw", "bytes"),
            ({}, "dict"),
            ([], "list"),
            ((), "tuple"),
            ({1}, "set"),
            (frozenset(), "frozenset"),
        ],
    )
    def test_builtin_labels(self, value, label):
        assert render(value)[0] == label

    def test_user_type_uses_qualname(self):
        assert render(Point(1, 2))[0] == "Point"

    def test_nested_class_qualname(self):
        class Inner:
            pass

        assert render(Inner())[0].endswith("test_nested_class_qualname.<locals>.Inner")

    def test_dict_subclass(self):
        assert render(OrderedDict(a=1))[0] == "OrderedDict"


class TestRepresentation:
    """Test debug representations."""

    def test_string_is_double_quoted(self):
        assert render("foo") == ("string", '"foo"')

    def test_string_escaping(self):
        assert render('say "hi"\n')[1] == '"say \\"hi\\"\\n"'

    def test_non_ascii_kept(self):
        assert render("héllo")[1] == '"héllo"'

    def test_key_value_structure(self):
        type_name, representation = render({"is_a_bar": True})
        assert type_name == "dict"
        assert representation == '{"is_a_bar": true}'
        assert "is_a_bar" in representation and "true" in representation

    def test_list(self):
        assert render(["baz", 3]) == ("list", '["baz", 3]')

    def test_tuples(self):
        assert render((1,))[1] == "(1,)"
        assert render((1, "a"))[1] == '(1, "a")'
        assert render(())[1] == "()"

    def test_sets(self):
        assert render({7})[1] == "{7}"
        assert render(set())[1] == "set()"
        assert render(frozenset())[1] == "frozenset()"

    def test_literals(self):
        assert render(None)[1] == "null"
        assert render(False)[1] == "false"
        assert render(42)[1] == "42"
        assert render(2.5)[1] == "2.5"

    def test_nested_containers(self):
        value = {"items": [1, None, {"ok": False}], 3: ("x",)}
        assert render(value)[1] == '{"items": [1, null, {"ok": false}], 3: ("x",)}'

    def test_user_object_uses_repr(self):
        assert render(Point(1, 2)) == ("Point", "Point(1, 2)")

    def test_self_referencing_list(self):
        value = [1]
        value.append(value)
        assert render(value)[1] == "[1, ...]"

    def test_shared_reference_is_not_recursion(self):
        shared = [1]
        assert render([shared, shared])[1] == "[[1], [1]]"


class TestFailures:
    """Rendering never raises."""

    def test_broken_repr(self):
        assert render(BrokenRepr()) == ("BrokenRepr", UNRENDERABLE)

    def test_broken_repr_inside_container(self):
        assert render([1, BrokenRepr()]) == ("list", UNRENDERABLE)

    def test_broken_dict_items(self):
        class BadDict(dict):
            def items(self):
                raise ValueError("broken")

        type_name, representation = render(BadDict(a=1))
        assert type_name == BadDict.__qualname__
        assert representation == UNRENDERABLE


class TestTruncation:
    """Long representations are shortened."""

    def test_explicit_limit(self):
        renderer = ValueRenderer(max_length=5)
        assert renderer.render("abcdefgh") == ("string", '"abcd...')

    def test_config_limit(self):
        Config.set("max_repr_length", 3)
        assert render([1, 2, 3])[1] == "[1,..."

    def test_short_values_untouched(self):
        renderer = ValueRenderer(max_length=100)
        assert renderer.render("abc")[1] == '"abc"'
