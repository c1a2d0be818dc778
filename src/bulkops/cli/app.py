"""
Root Typer application for the bulkops CLI.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from typer import Typer

from bulkops.cli.config import app as config_app
from bulkops.cli.descriptors import app as descriptors_app
from bulkops.cli.utils import console, fail, load_registry, parse_pairs, print_json
from bulkops.core.errors import BulkOpsError
from bulkops.framework.logging import configure_logging
from bulkops.framework.operations import create_operation
from bulkops.framework.tokens import ListingArgument, ListingContext

app = Typer(
    name="bulkops",
    help="bulkops — configure and execute bulk operations.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from bulkops import __version__

        typer.echo(f"bulkops {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override BULKOPS_LOG_LEVEL"),
) -> None:
    """bulkops CLI — inspect descriptors and check operation configurations."""
    configure_logging(level=log_level.upper() if log_level else None)


@app.command("check")
def check(
    key: str = typer.Argument(..., help="Operation key"),
    file: Path | None = typer.Argument(None, help="Descriptor YAML file"),
    entity_type: str = typer.Option(..., "--entity-type", "-e", help="Entity type"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Admin configuration JSON file"),
    arg: list[str] = typer.Option([], "--arg", "-a", help="Listing argument NAME=VALUE (repeatable, in order)"),
    field: list[str] = typer.Option([], "--field", help="Row field NAME=VALUE (repeatable)"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Resolve provided parameters and decide whether a form is needed."""
    registry = load_registry(file)

    options = {}
    if config is not None:
        try:
            options = json.loads(config.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise fail(f"Cannot read admin configuration: {e}") from e

    arguments = [ListingArgument(name, value) for name, value in parse_pairs(arg, "--arg")]
    fields = dict(parse_pairs(field, "--field"))
    listing = ListingContext(arguments=arguments, rows=[fields] if (arguments or fields) else [])

    try:
        operation = create_operation(key, entity_type, options, listing, registry=registry)
    except BulkOpsError as e:
        raise fail(e.message) from e

    report = {
        "operation": operation.key,
        "label": operation.label,
        "aggregate": operation.aggregate,
        "provide_parameters": operation.admin_config.provide_parameters,
        "provided_parameters": operation.provided_parameters,
        "configurable": operation.configurable(),
        "token_options": operation.token_options,
    }

    if as_json:
        print_json(report)
        return

    console.print(f"[bold]{operation.label}[/bold] ({entity_type}::{operation.key})")
    console.print(f"Provide parameters: {report['provide_parameters']}")
    for name, value in report["provided_parameters"].items():
        console.print(f"  {name} = {value}")
    verdict = "[yellow]form required[/yellow]" if report["configurable"] else "[green]no form needed[/green]"
    console.print(f"Configurable: {verdict}")


app.add_typer(descriptors_app, name="descriptors", help="Operation descriptors.")
app.add_typer(config_app, name="config", help="Configuration inspection.")
