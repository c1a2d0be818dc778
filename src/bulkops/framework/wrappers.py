"""Subject wrappers handed to invoked actions."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from bulkops.framework.params import is_list_type, list_type


@dataclass(frozen=True)
class EntityWrapper:
    """A record (or list of records) tagged with its entity type."""

    type: str
    value: Any

    @property
    def kind(self) -> str:
        return "list" if is_list_type(self.type) else "single"

    @property
    def is_list(self) -> bool:
        return self.kind == "list"

    def items(self) -> tuple[Any, ...]:
        """The wrapped records, always as a tuple."""
        if self.is_list:
            return tuple(self.value)
        return (self.value,)

    def __len__(self) -> int:
        return len(self.items())


def is_batch(data: Any) -> bool:
    """A batch is any sequence that is not text and not a mapping-shaped record."""
    return isinstance(data, Sequence) and not isinstance(data, (str, bytes, bytearray, Mapping))


def wrap_subject(data: Any, entity_type: str) -> EntityWrapper:
    """Wrap ``data`` as ``list<entity_type>`` for batches, else as ``entity_type``."""
    if is_batch(data):
        return EntityWrapper(list_type(entity_type), tuple(data))
    return EntityWrapper(entity_type, data)
