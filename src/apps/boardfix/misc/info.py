"""CLI to display the resolved boardfix configuration."""

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Mapping, Optional

from typing_extensions import Annotated

import structlog
import typer

from apps.boardfix.config import load_profile, resolve_store_path

log = structlog.get_logger(__name__)
app = typer.Typer(help="Display environment and configuration info")


def _collect_report(profile: Optional[str], workspace: Optional[Path]) -> dict[str, Any]:
    context = load_profile(profile=profile, workspace=workspace)
    try:
        boardfix_version = metadata.version("boardfix")
    except metadata.PackageNotFoundError:  # pragma: no cover - not installed
        boardfix_version = "Unknown"

    return {
        "python_version": sys.version.split()[0],
        "boardfix_version": boardfix_version,
        "profile": context.name,
        "sources": [str(path) for path in context.sources],
        "store": str(resolve_store_path(context)),
        "actor": context.actor,
        "parent_kind": context.parent_kind,
    }


def _render_text_report(report: Mapping[str, Any]) -> None:
    typer.echo("=== boardfix info ===")
    typer.echo(f"Python version: {report['python_version']}")
    typer.echo(f"boardfix version: {report['boardfix_version']}")
    typer.echo(f"Profile: {report['profile']}")
    sources = report["sources"]
    typer.echo("Config files: " + (", ".join(sources) if sources else "None"))
    typer.echo(f"Block store: {report['store']}")
    typer.echo(f"Default actor: {report['actor']}")
    typer.echo(f"Parent kind: {report['parent_kind']}")


@app.command("info")
def info(
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Choose output format (text or json).",
            case_sensitive=False,
        ),
    ] = "text",
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Override the profile name to load."
    ),
    workspace: Optional[Path] = typer.Option(
        None, "--workspace", help="Directory holding a workspace boardfix.toml."
    ),
) -> None:
    """Print the configuration boardfix would use."""

    report = _collect_report(profile, workspace)
    log.info("info_report", profile=report["profile"], store=report["store"])

    if output_format.lower() == "json":
        typer.echo(json.dumps(report, indent=2, sort_keys=True))
        return

    _render_text_report(report)
