"""Test fixtures for Method Trace tests."""

import io

import pytest

from methodtrace import CallTracer, Config, TraceRegistry


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Fresh configuration and no environment override for every test."""
    monkeypatch.delenv("METHODTRACE_ENABLED", raising=False)
    Config.reset()
    yield
    Config.reset()


@pytest.fixture
def stream():
    """In-memory stream that receives trace lines."""
    return io.StringIO()


@pytest.fixture
def tracer(stream):
    return CallTracer(stream=stream)


@pytest.fixture
def registry(tracer):
    """Registry writing to the in-memory stream; uninstalls everything afterwards."""
    reg = TraceRegistry(tracer=tracer)
    yield reg
    reg.clear()


@pytest.fixture
def lines(stream):
    """Callable returning the trace lines written so far."""

    def read():
        return stream.getvalue().splitlines()

    return read


@pytest.fixture
def example_class():
    """Fresh class per test so installs never leak between tests."""

    class Example:
        def foo(self):
            return "foo"

        def bar(self):
            return {"is_a_bar": True}

        def baz(self):
            return ["baz", len("baz")]

        def add(self, x, y=10):
            return x + y

    return Example
