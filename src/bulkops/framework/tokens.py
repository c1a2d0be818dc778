"""Token rendering and provided-parameter resolution.

A listing exposes its arguments as positional tokens (``!1``, ``!2``...)
in declaration order, and each row exposes its field values as
``[field]`` tokens. Admin-configured parameter expressions are rendered
against an explicit RowContext; there is no ambient "current row".
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from bulkops.core.config import get_settings
from bulkops.core.errors import BulkOpsError
from bulkops.framework.descriptors import OperationDescriptor
from bulkops.framework.logging import get_logger
from bulkops.framework.params import coerce_value

log = get_logger(__name__)

TokenOptions = dict[str, str]
ResolvedParameters = dict[str, Any]

_POSITIONAL_TOKEN = re.compile(r"!(\d+)")
_FIELD_TOKEN = re.compile(r"\[([A-Za-z0-9_\-]+)\]")
_TAG = re.compile(r"<!--.*?-->|<[^>]*>", re.DOTALL)


@dataclass(frozen=True)
class ListingArgument:
    """One argument handler of the listing: its UI name and current value."""

    name: str
    value: Any = None


@dataclass(frozen=True)
class RowContext:
    """Everything token rendering needs about one row of the listing."""

    index: int
    arguments: tuple[Any, ...] = ()
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class ListingContext:
    """The listing an operation is attached to."""

    arguments: Sequence[ListingArgument] = ()
    rows: Sequence[Mapping[str, Any]] = ()

    def row_context(self, index: int = 0) -> RowContext | None:
        """Context for one row, or None when the listing has no such row."""
        if index < 0 or index >= len(self.rows):
            return None
        return RowContext(
            index=index,
            arguments=tuple(arg.value for arg in self.arguments),
            fields=dict(self.rows[index]),
        )

    def token_options(self) -> TokenOptions:
        """Selector options for admin parameter mapping, ``""`` meaning none."""
        settings = get_settings()
        options: TokenOptions = {"": settings.token_none_label}
        for position, argument in enumerate(self.arguments, start=1):
            options[f"!{position}"] = settings.argument_label_template.format(argument=argument.name)
        return options


class TokenRenderer(Protocol):
    """Renders a token expression against a row."""

    def render(self, row: RowContext, expression: str) -> str: ...


class PositionalTokenRenderer:
    """
    Default renderer: ``!N`` is the N-th listing argument, ``[name]`` a row field.

    Tokens that do not resolve are left in place, so literal text that merely
    looks like a token survives rendering.
    """

    def render(self, row: RowContext, expression: str) -> str:
        def positional(match: re.Match[str]) -> str:
            position = int(match.group(1))
            if 1 <= position <= len(row.arguments):
                value = row.arguments[position - 1]
                return "" if value is None else str(value)
            return match.group(0)

        def field_value(match: re.Match[str]) -> str:
            name = match.group(1)
            if name in row.fields:
                value = row.fields[name]
                return "" if value is None else str(value)
            return match.group(0)

        text = _POSITIONAL_TOKEN.sub(positional, expression)
        return _FIELD_TOKEN.sub(field_value, text)


def strip_tags(text: str) -> str:
    """Remove markup tags and comments, keeping the text between them."""
    return _TAG.sub("", text)


def render_parameter(renderer: TokenRenderer, row: RowContext, expression: str) -> str:
    """Render an expression as plain trimmed text."""
    return strip_tags(renderer.render(row, expression)).strip()


def resolve_parameters(
    descriptor: OperationDescriptor,
    expressions: Mapping[str, str],
    row: RowContext | None,
    renderer: TokenRenderer | None = None,
) -> ResolvedParameters:
    """
    Resolve admin parameter expressions into concrete values.

    ``expressions`` maps ``"<name>:<type>"`` keys to token expressions or
    literals. Entries that do not name a non-subject parameter of the
    descriptor, that render empty (or ``"0"``) or that fail type coercion
    are dropped; the result never raises.
    """
    if row is None or not expressions:
        return {}

    renderer = renderer or PositionalTokenRenderer()
    params_by_key = {p.key: p for p in descriptor.non_subject_parameters}
    resolved: ResolvedParameters = {}

    for key, expression in expressions.items():
        param = params_by_key.get(key)
        if param is None:
            log.warning("tokens.unknown_parameter", operation=descriptor.key, parameter=key)
            continue
        if not expression:
            continue
        value = render_parameter(renderer, row, expression)
        if not value or value == "0":
            log.debug("tokens.parameter_empty", operation=descriptor.key, parameter=param.name)
            continue
        try:
            resolved[param.name] = coerce_value(param.type, value)
        except BulkOpsError as e:
            log.warning(
                "tokens.parameter_dropped",
                operation=descriptor.key,
                parameter=param.name,
                error=e.message,
            )

    return resolved
