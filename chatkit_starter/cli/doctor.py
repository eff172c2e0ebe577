"""
ChatKit starter CLI - Doctor Commands

Diagnostic checks for a ChatKit starter deployment: the server-held
secret, the workflow id, the API base address, and the widget script.

Commands:
    run   - Run all diagnostic checks
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Callable, Optional

import typer
from rich.panel import Panel

from chatkit_starter.cli import console, doctor_app


@dataclass
class CheckResult:
    """Outcome of one diagnostic check."""

    name: str
    passed: bool
    message: str
    details: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


# name -> check; network checks are skipped with --offline
CHECKS: dict[str, Callable[[], CheckResult]] = {}
NETWORK_CHECKS = {"script"}


def register_check(name: str):
    """Decorator to register a diagnostic check."""
    def decorator(func: Callable[[], CheckResult]):
        CHECKS[name] = func
        return func
    return decorator


@register_check("api_key")
def _check_api_key() -> CheckResult:
    from chatkit_starter.config.settings import settings

    if not settings.OPENAI_API_KEY:
        return CheckResult(
            "API key", False, "OPENAI_API_KEY is not set",
            details="The broker answers every create-session call with a configuration error.",
        )
    return CheckResult("API key", True, "OPENAI_API_KEY is set")


@register_check("workflow")
def _check_workflow() -> CheckResult:
    from chatkit_starter.broker.service import is_placeholder_workflow_id
    from chatkit_starter.config.settings import settings

    workflow_id = settings.CHATKIT_WORKFLOW_ID
    if not workflow_id:
        return CheckResult("Workflow id", False, "CHATKIT_WORKFLOW_ID is not set")
    if is_placeholder_workflow_id(workflow_id):
        return CheckResult("Workflow id", False, f"'{workflow_id}' is a placeholder value")
    return CheckResult("Workflow id", True, workflow_id)


@register_check("api_base")
def _check_api_base() -> CheckResult:
    from chatkit_starter.config.settings import settings

    base = settings.CHATKIT_API_BASE
    if not base.startswith("https://"):
        return CheckResult("API base", False, f"{base} is not an https URL")
    return CheckResult("API base", True, base)


@register_check("script")
def _check_script() -> CheckResult:
    import httpx

    from chatkit_starter.config.settings import settings

    url = settings.CHATKIT_SCRIPT_URL
    try:
        resp = httpx.get(url, follow_redirects=True, timeout=10.0)
    except httpx.HTTPError as e:
        return CheckResult("Widget script", False, f"Unreachable: {type(e).__name__}", details=url)
    if resp.is_error:
        return CheckResult("Widget script", False, f"HTTP {resp.status_code}", details=url)
    return CheckResult("Widget script", True, "Reachable", details=url)


@doctor_app.command("run")
def run_diagnostics(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed output for all checks.",
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Skip checks that need network access.",
    ),
    check: Optional[list[str]] = typer.Option(
        None,
        "--check",
        "-c",
        help="Run specific checks only.",
    ),
    output: str = typer.Option(
        "rich",
        "--output",
        "-o",
        help="Output format: rich, json.",
    ),
) -> None:
    """
    Run diagnostic checks on the current configuration.

    Exits with status 1 when any check fails.
    """
    from chatkit_starter.cli.output import print_json, print_status, print_success, print_warning

    checks_to_run = check if check else list(CHECKS.keys())
    if offline:
        checks_to_run = [name for name in checks_to_run if name not in NETWORK_CHECKS]

    unknown = [name for name in checks_to_run if name not in CHECKS]
    if unknown:
        console.print(f"[red]Unknown check(s): {', '.join(unknown)}[/red]")
        raise typer.Exit(2)

    results = [CHECKS[name]() for name in checks_to_run]

    if output == "json":
        print_json({"results": [r.to_dict() for r in results]})
    else:
        console.print(Panel.fit("[bold]ChatKit starter diagnostics[/bold]"))
        console.print()
        print_status([(r.name, r.passed, r.message) for r in results])

        if verbose:
            console.print()
            for r in results:
                if r.details:
                    console.print(f"  [dim]{r.name}:[/dim] {r.details}")

        console.print()

    passed = sum(1 for r in results if r.passed)
    failed = len(results) - passed

    if output != "json":
        if failed == 0:
            print_success(f"All {passed} checks passed!")
        else:
            print_warning(f"{passed} passed, {failed} failed")

    if failed:
        raise typer.Exit(1)
