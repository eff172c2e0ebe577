"""Rich console helpers shared by the CLI commands.

Nothing printed here may contain a client secret or the API key; callers
pass secrets through :func:`mask_secret` first.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from rich.console import Console
from rich.json import JSON

console = Console()
err_console = Console(stderr=True)

_BADGES = {True: "[green]PASS[/green]", False: "[red]FAIL[/red]"}


def mask_secret(value: str, visible: int = 4) -> str:
    """Keep the first *visible* characters of a secret and hide the rest."""
    if not value:
        return "(not set)"
    if len(value) <= visible * 2:
        return "*" * len(value)
    return value[:visible] + "*" * 8


def print_status(checks: Iterable[tuple[str, bool, str]], title: Optional[str] = None) -> None:
    """Print one PASS/FAIL line per ``(name, passed, message)`` check."""
    if title:
        console.print(f"[bold]{title}[/bold]\n")
    for name, passed, message in checks:
        color = "green" if passed else "red"
        console.print(f"  {_BADGES[passed]} [cyan]{name}[/cyan]: [{color}]{message}[/{color}]")


def print_json(data: Any, indent: int = 2) -> None:
    console.print(JSON(json.dumps(data, indent=indent, default=str)))


def _print(target: Console, label: str, message: str, details: Optional[str]) -> None:
    target.print(f"{label} {message}")
    if details:
        target.print(f"[dim]{details}[/dim]")


def print_error(message: str, details: Optional[str] = None, hint: Optional[str] = None) -> None:
    """Print an error on stderr, with an optional hint for fixing it."""
    _print(err_console, "[bold red]Error:[/bold red]", message, details)
    if hint:
        err_console.print(f"[yellow]Hint:[/yellow] {hint}")


def print_success(message: str, details: Optional[str] = None) -> None:
    _print(console, "[bold green]Success:[/bold green]", message, details)


def print_warning(message: str, details: Optional[str] = None) -> None:
    _print(console, "[bold yellow]Warning:[/bold yellow]", message, details)


def print_info(message: str, details: Optional[str] = None) -> None:
    _print(console, "[bold blue]Info:[/bold blue]", message, details)
