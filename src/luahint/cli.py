"""Typer CLI for luahint."""

from __future__ import annotations

import json
import platform
import shutil
from pathlib import Path

import typer

from luahint.config import load_settings
from luahint.logging import configure_logging

app = typer.Typer(no_args_is_help=True)


@app.command()
def run(
    files: list[Path] = typer.Argument(None, help="Files to open."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
) -> None:
    """Launch the editor with inline hints."""

    from luahint.main import main as launch

    launch(files or [], level="DEBUG" if verbose else "INFO")


@app.command()
def doctor() -> None:
    """Print environment diagnostics."""

    settings = load_settings()
    configure_logging(settings)
    server_cmd = settings.hints.server.cmd
    info = {
        "python": platform.python_version(),
        "platform": platform.platform(),
        "server": {
            "cmd": server_cmd,
            "found": shutil.which(server_cmd[0]) if server_cmd else None,
        },
        "paths": {
            "home": str(settings.paths.base_dir),
            "logs": str(settings.paths.logs_dir),
        },
    }
    typer.echo(json.dumps(info, indent=2))


@app.command()
def settings(key: str | None = typer.Argument(None)) -> None:
    """Display current settings or a specific section."""

    data = load_settings().model_dump(exclude={"hints": {"root_dir"}})
    if key:
        data = data.get(key, {})
    typer.echo(json.dumps(data, indent=2, default=str))
