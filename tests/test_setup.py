"""Test to verify pytest setup is working correctly."""


def test_import_methodtrace():
    """Verify we can import the methodtrace package."""
    import methodtrace

    assert methodtrace.__version__ == "0.1.0"


def test_public_api():
    """The public entry points are exported from the package root."""
    import methodtrace

    for name in ("install", "uninstall", "install_all", "trace", "render", "CallTracer"):
        assert hasattr(methodtrace, name)


def test_python_version():
    """Verify Python version is 3.8+."""
    import sys

    assert sys.version_info >= (3, 8)
