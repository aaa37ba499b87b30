"""Sample entities used by ``methodtrace demo``."""

from .core.registration import TraceRegistry


class Example:
    def foo(self):
        return "foo"

    def bar(self):
        return {"is_a_bar": True}

    def baz(self):
        return ["baz", len("baz")]


class Greeting:
    """Mixin whose operations are traced through the class that uses it."""

    def greet(self):
        return "Hit Greeting#greet"


class Greeter(Greeting):
    pass


def run_demo(registry: TraceRegistry):
    """Trace the sample entities and call each operation once."""
    registry.install(Example, ["foo", "bar", "baz"])
    registry.install_all(Greeter, include_inherited=True)

    example = Example()
    example.foo()
    example.bar()
    example.baz()
    Greeter().greet()
