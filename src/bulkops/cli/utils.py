"""
CLI utility helpers — output formatting and descriptor loading.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from bulkops.core.config import get_settings
from bulkops.framework.registry import OperationDescriptorRegistry, load_descriptors

console = Console()
err_console = Console(stderr=True)


def fail(message: str, code: int = 1) -> typer.Exit:
    """Print an error and return the Exit to raise."""
    err_console.print(f"[bold red]Error:[/bold red] {message}")
    return typer.Exit(code=code)


def load_registry(path: Path | None) -> OperationDescriptorRegistry:
    """Load descriptors from ``path`` or the configured descriptor file."""
    source = path or (Path(get_settings().descriptor_file) if get_settings().descriptor_file else None)
    if source is None:
        raise fail("No descriptor file given (pass one or set BULKOPS_DESCRIPTOR_FILE)")
    if not source.exists():
        raise fail(f"Descriptor file not found: {source}")
    registry = OperationDescriptorRegistry()
    try:
        load_descriptors(source, registry)
    except ValueError as e:
        raise fail(str(e)) from e
    return registry


def parse_pairs(pairs: list[str], option: str) -> list[tuple[str, str]]:
    """Split ``NAME=VALUE`` option values."""
    parsed = []
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise fail(f"{option} expects NAME=VALUE, got {pair!r}")
        parsed.append((name, value))
    return parsed


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))
