"""
CLI: ``bulkops descriptors`` — inspect operation descriptors.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from bulkops.cli.utils import console, fail, load_registry, print_json
from bulkops.core.errors import OperationNotFoundError

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_cmd(
    file: Path | None = typer.Argument(None, help="Descriptor YAML file"),
    entity_type: str | None = typer.Option(None, "--entity-type", "-e", help="Only this entity type"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """List registered operations."""
    registry = load_registry(file)
    descriptors = registry.descriptors(entity_type)

    if as_json:
        print_json(
            [
                {
                    "key": d.key,
                    "entity_type": d.entity_type,
                    "label": d.label,
                    "aggregate": d.aggregate,
                    "parameters": [p.key for p in d.non_subject_parameters],
                }
                for d in descriptors
            ]
        )
        return

    table = Table(title="Operations")
    table.add_column("Entity type")
    table.add_column("Key")
    table.add_column("Label")
    table.add_column("Aggregate")
    table.add_column("Parameters")
    for d in descriptors:
        table.add_row(
            d.entity_type,
            d.key,
            d.label,
            "yes" if d.aggregate else "no",
            ", ".join(p.key for p in d.non_subject_parameters) or "-",
        )
    console.print(table)


@app.command("show")
def show_cmd(
    key: str = typer.Argument(..., help="Operation key"),
    file: Path | None = typer.Argument(None, help="Descriptor YAML file"),
    entity_type: str = typer.Option(..., "--entity-type", "-e", help="Entity type"),
) -> None:
    """Show one operation and its parameters."""
    registry = load_registry(file)
    try:
        descriptor = registry.resolve(key, entity_type)
    except OperationNotFoundError as e:
        raise fail(e.message) from e

    console.print(f"[bold]{descriptor.label}[/bold] ({descriptor.entity_type}::{descriptor.key})")
    if descriptor.description:
        console.print(descriptor.description)

    table = Table()
    table.add_column("Parameter")
    table.add_column("Type")
    table.add_column("Role")
    table.add_column("Default")
    for param in descriptor.parameters:
        role = "subject" if param.subject else ("primitive" if param.primitive else "structured")
        if param.optional:
            role += ", optional"
        table.add_row(param.name, param.type, role, "" if param.default is None else str(param.default))
    console.print(table)
