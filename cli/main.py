"""Command Line Interface using Typer."""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Optional

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.markup import escape

from core.aggregator import get_subject_schemas
from core.initialization import initialize_system
from observability.logging import setup_logging
from registry.client import RegistryClient, create_client
from schemas.registry_schemas import AggregationError, RegistryError, SubjectSchemas

load_dotenv()

console = Console()


class LogLevel(str, Enum):
    debug = "DEBUG"
    info = "INFO"
    warning = "WARNING"
    error = "ERROR"
    critical = "CRITICAL"


setup_logging()

logger = logging.getLogger(__name__)


def log_level_callback(level: LogLevel | None):
    if level:
        logger.info(f"Setting log level to: {level.value}")
        setup_logging(log_level_arg=level.value)


app = typer.Typer(
    help="Schema Registry CLI - Fetch and decode subject schemas.",
    add_completion=False,
)


def run_async(coroutine):
    """Run a coroutine and return its result."""
    return asyncio.run(coroutine)


def _open_client(url: Optional[str]) -> RegistryClient:
    """Create a client, exiting with code 2 on invalid settings."""
    try:
        return create_client(url=url)
    except ValidationError as e:
        rprint(
            f":x: [bold red]Invalid registry settings:[/bold red] {escape(str(e))}"
        )
        raise typer.Exit(code=2) from e


async def _with_client(client: RegistryClient, operation, *args) -> Any:
    async with client:
        return await operation(client, *args)


def _print_json(data: Any):
    console.print_json(json.dumps(data, default=str))


def _report_registry_error(error: RegistryError):
    rprint(f"\n:x: [bold red]Registry request failed:[/bold red] {error.code}")
    rprint(f"   Reason: {escape(str(error.reason))}")


def _report_aggregation_error(error: AggregationError):
    rprint(
        f"\n:x: [bold red]Schema aggregation failed at stage "
        f"{error.stage.value}.[/bold red]"
    )
    if error.subject:
        rprint(f"   Subject: {escape(error.subject)}")
    rprint(f"   Code: {error.code}")
    rprint(f"   Reason: {escape(str(error.reason))}")


@app.command()
def info():
    """Display information about the CLI and the configured registry."""
    rprint(":information_source: [bold]Schema Registry CLI Information[/bold]")
    rprint("Fetches the latest schema of every subject and decodes it.")
    try:
        settings = initialize_system()
        rprint(f"Registry URL: [bold blue]{settings.url}[/bold blue]")
    except ValidationError as e:
        rprint(f":warning: Registry settings are invalid: {escape(str(e))}")
    rprint("\nUse [bold]--help[/bold] for available commands and options.")
    return 0


@app.command()
def subjects(
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="Registry URL, overrides SCHEMA_REGISTRY_URL."
    ),
):
    """List the subjects registered in the schema registry."""
    client = _open_client(url)
    result = run_async(_with_client(client, RegistryClient.list_subjects))
    if isinstance(result, RegistryError):
        _report_registry_error(result)
        raise typer.Exit(code=1)
    _print_json(result)


@app.command()
def schema(
    subject: str = typer.Argument(..., help="Subject to fetch the schema of."),
    version: str = typer.Option("latest", help="Schema version number or 'latest'."),
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="Registry URL, overrides SCHEMA_REGISTRY_URL."
    ),
):
    """Print one raw schema record of a subject."""
    client = _open_client(url)
    result = run_async(
        _with_client(client, RegistryClient.get_schema, subject, version)
    )
    if isinstance(result, RegistryError):
        _report_registry_error(result)
        raise typer.Exit(code=1)
    _print_json(result.model_dump(by_alias=True))


@app.command()
def schemas(
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="Registry URL, overrides SCHEMA_REGISTRY_URL."
    ),
    output_file: Optional[str] = typer.Option(
        None, "--output", "-o", help="Save the decoded schemas to a JSON file."
    ),
):
    """Fetch and decode the latest schema of every subject."""
    rprint(":mag: Fetching subject schemas...")
    client = _open_client(url)
    result: SubjectSchemas = run_async(_with_client(client, get_subject_schemas))

    if not result.ok:
        logger.warning(
            f"Schema aggregation failed at {result.error.stage.value}",
            extra={"stage": result.error.stage.value, "subject": result.error.subject},
        )
        _report_aggregation_error(result.error)
        raise typer.Exit(code=1)

    rprint(
        f"\n:white_check_mark: [bold green]Decoded {len(result.schemas)} "
        f"schemas.[/bold green]"
    )
    _print_json(result.schemas)

    if output_file:
        try:
            with open(output_file, "w") as f:
                json.dump(result.schemas, f, indent=2)
            rprint(f"\nSchemas saved to: [bold blue]{output_file}[/bold blue]")
        except OSError as e:
            rprint(
                ":x: [bold red]Error saving schemas to file:[/bold red] "
                f"{escape(str(e))}"
            )
            raise typer.Exit(code=1) from e


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Optional[LogLevel] = typer.Option(  # noqa: B008
        None,
        "--log-level",
        "-L",
        help="Set logging level.",
    ),
):
    """
    Schema Registry CLI
    """
    log_level_callback(log_level)


if __name__ == "__main__":
    app()
