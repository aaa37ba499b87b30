"""
Method Trace CLI - entry point for the methodtrace command
"""

import logging
import os
import runpy
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__
from .config import ENABLED_ENV_VAR, Config, load_config
from .core.registration import get_registry


@click.group()
@click.version_option(version=__version__, prog_name="methodtrace")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a JSON configuration file",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], debug: bool):
    """Method Trace - before/after tracing for Python calls"""
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config) if config else Config.get_instance()

    if debug:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=ctx.obj["config"].log_level)


@cli.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.option("--trace/--no-trace", default=True, help="Enable or disable tracing for the script")
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@click.argument("script_args", nargs=-1, type=click.UNPROCESSED)
def run(trace: bool, script: str, script_args: Tuple[str, ...]):
    """Run SCRIPT with tracing switched on or off.

    The script opts in with methodtrace.install() or @methodtrace.trace; the
    toggle decides whether those calls take effect.
    """
    Config.set("enabled", trace)
    os.environ[ENABLED_ENV_VAR] = "1" if trace else "0"

    saved_argv = sys.argv
    sys.argv = [script, *script_args]
    try:
        runpy.run_path(script, run_name="__main__")
    except SystemExit as e:
        if e.code not in (None, 0):
            raise
    finally:
        sys.argv = saved_argv


@cli.command()
def demo():
    """Trace a few sample classes and call them."""
    from .demo import run_demo

    registry = get_registry()
    try:
        run_demo(registry)
    finally:
        registry.clear()


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
