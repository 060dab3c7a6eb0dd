"""
CLI for wiring checks and manual dispatch against an importable registry.
TARGET is "package.module:attr" where attr is a Registry (or a zero-argument factory returning one).
"""
from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Any, Optional

import typer

from eventroute.core.config import Settings
from eventroute.core.logging import configure_from_settings
from eventroute.events.errors import DecodeError, EventRouteError, NoHandlerError
from eventroute.events.handler import validate_handler
from eventroute.events.registry import Registry

app = typer.Typer(help="eventroute CLI: inspect registries and dispatch events by name.")

EXIT_FAILED = 1
EXIT_NO_HANDLER = 3
EXIT_DECODE_ERROR = 4


def _import_attr(target: str) -> Any:
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise typer.BadParameter(f"expected 'package.module:attr', got {target!r}")
    if "" not in sys.path and str(Path.cwd()) not in sys.path:
        sys.path.insert(0, str(Path.cwd()))
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"cannot import {module_name!r}: {e}") from e
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise typer.BadParameter(f"{module_name!r} has no attribute {attr!r}") from None
    return obj


def _load_registry(target: str) -> Registry:
    obj = _import_attr(target)
    if not isinstance(obj, Registry) and callable(obj):
        obj = obj()
    if not isinstance(obj, Registry):
        raise typer.BadParameter(f"{target!r} is not a Registry (got {type(obj).__name__})")
    return obj


@app.callback()
def _setup() -> None:
    """Logging from EVENTROUTE_LOG_LEVEL / EVENTROUTE_LOG_JSON."""
    configure_from_settings(Settings.from_env())


@app.command()
def names(target: str = typer.Argument(..., help="Registry import path, module:attr")) -> None:
    """Print registered event names, one per line."""
    for name in _load_registry(target).names():
        typer.echo(name)


@app.command()
def check(target: str = typer.Argument(..., help="Handler import path, module:function")) -> None:
    """Validate a handler's shape without registering it."""
    err = validate_handler(_import_attr(target))
    if err is not None:
        typer.echo(str(err), err=True)
        raise typer.Exit(1)
    typer.echo("ok")


@app.command()
def dispatch(
    target: str = typer.Argument(..., help="Registry import path, module:attr"),
    event_name: str = typer.Argument(..., help="Event name, e.g. order.completed"),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Payload text (e.g. JSON)"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read payload bytes from file ('-' for stdin)"),
) -> None:
    """Dispatch one payload. Exit 3: no handler, 4: decode error, 1: any other failure."""
    if data is not None and file is not None:
        raise typer.BadParameter("use either --data or --file, not both")
    registry = _load_registry(target)
    if file is None:
        payload: bytes = (data or "").encode("utf-8")
    elif str(file) == "-":
        payload = sys.stdin.buffer.read()
    else:
        payload = file.read_bytes()

    try:
        registry.dispatch(event_name, payload)
    except NoHandlerError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(EXIT_NO_HANDLER)
    except DecodeError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(EXIT_DECODE_ERROR)
    except EventRouteError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(EXIT_FAILED)
    except Exception as e:
        typer.echo(f"handler failed: {type(e).__name__}: {e}", err=True)
        raise typer.Exit(EXIT_FAILED)
    typer.echo(f"dispatched {event_name}")


def main() -> None:
    """Entry point for the eventroute console command."""
    app()


if __name__ == "__main__":
    main()
