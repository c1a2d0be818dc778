"""Operation descriptor registry.

Manifesto:
    A central registry lets listings discover operations at runtime
    by (entity type, key) without import-time coupling to the code that
    implements them.

The registry also keeps the Python callable implementing each operation;
the in-process rule engine looks it up when a bound unit is invoked.

Tags:
    bulkops, framework, registry, lookup

Doc-Types:
    api-reference
"""

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from bulkops.core.errors import OperationNotFoundError
from bulkops.framework.descriptors import DescriptorFileSpec, OperationDescriptor
from bulkops.framework.logging import get_logger
from bulkops.framework.params import ParameterSpec

logger = get_logger(__name__)

ActionImpl = Callable[..., Any]
AccessCheck = Callable[[Any], bool]


class OperationDescriptorRegistry:
    """Descriptors keyed by (entity type, operation key)."""

    def __init__(self) -> None:
        self._descriptors: dict[tuple[str, str], OperationDescriptor] = {}
        self._implementations: dict[tuple[str, str], ActionImpl] = {}
        self._access_checks: dict[tuple[str, str], AccessCheck] = {}

    def register(
        self,
        descriptor: OperationDescriptor,
        implementation: ActionImpl | None = None,
        access: AccessCheck | None = None,
    ) -> OperationDescriptor:
        ident = (descriptor.entity_type, descriptor.key)
        if ident in self._descriptors:
            raise ValueError(
                f"Operation '{descriptor.key}' is already registered for entity type '{descriptor.entity_type}'"
            )
        self._descriptors[ident] = descriptor
        if implementation is not None:
            self._implementations[ident] = implementation
        if access is not None:
            self._access_checks[ident] = access
        logger.debug(
            "registry.registered",
            key=descriptor.key,
            entity_type=descriptor.entity_type,
            parameters=len(descriptor.parameters),
        )
        return descriptor

    def resolve(self, key: str, entity_type: str) -> OperationDescriptor:
        """
        Get a descriptor by key for an entity type.

        Raises:
            OperationNotFoundError: If the key is not registered for that entity type.
        """
        descriptor = self._descriptors.get((entity_type, key))
        if descriptor is None:
            raise OperationNotFoundError(key, entity_type, available=self.keys(entity_type))
        return descriptor

    def implementation(self, key: str, entity_type: str) -> ActionImpl | None:
        self.resolve(key, entity_type)
        return self._implementations.get((entity_type, key))

    def access_check(self, key: str, entity_type: str) -> AccessCheck | None:
        self.resolve(key, entity_type)
        return self._access_checks.get((entity_type, key))

    def keys(self, entity_type: str | None = None) -> list[str]:
        return sorted(k for (et, k) in self._descriptors if entity_type is None or et == entity_type)

    def descriptors(self, entity_type: str | None = None) -> list[OperationDescriptor]:
        return sorted(
            (d for d in self._descriptors.values() if entity_type is None or d.entity_type == entity_type),
            key=lambda d: (d.entity_type, d.key),
        )

    def load(self, descriptors: Iterable[OperationDescriptor]) -> int:
        count = 0
        for descriptor in descriptors:
            self.register(descriptor)
            count += 1
        return count

    def clear(self) -> None:
        """Clear registry (for testing)."""
        self._descriptors.clear()
        self._implementations.clear()
        self._access_checks.clear()

    def __contains__(self, ident: tuple[str, str]) -> bool:
        return ident in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)


# Global registry
_registry = OperationDescriptorRegistry()


def get_registry() -> OperationDescriptorRegistry:
    return _registry


def register_action(
    key: str,
    entity_type: str,
    parameters: Iterable[ParameterSpec],
    *,
    label: str = "",
    aggregate: bool = False,
    description: str = "",
    access: AccessCheck | None = None,
) -> Callable[[ActionImpl], ActionImpl]:
    """
    Decorator to register a function as an operation.

    The function is called as ``func(subject, **values)`` where ``subject`` is
    an EntityWrapper and ``values`` holds the non-subject parameters.

    Usage:
        @register_action("notify", "node", [
            ParameterSpec("node", "node", subject=True),
            ParameterSpec("message", "text"),
        ])
        def notify(subject, message):
            ...
    """

    def decorator(func: ActionImpl) -> ActionImpl:
        descriptor = OperationDescriptor(
            key=key,
            entity_type=entity_type,
            label=label or key,
            parameters=tuple(parameters),
            aggregate=aggregate,
            description=description or (func.__doc__ or "").strip(),
        )
        _registry.register(descriptor, implementation=func, access=access)
        return func

    return decorator


def get_descriptor(key: str, entity_type: str) -> OperationDescriptor:
    """Get a descriptor from the global registry."""
    return _registry.resolve(key, entity_type)


def list_descriptors(entity_type: str | None = None) -> list[OperationDescriptor]:
    return _registry.descriptors(entity_type)


def load_descriptors(path: str | Path, registry: OperationDescriptorRegistry | None = None) -> int:
    """Register every descriptor of a YAML file; returns how many were added."""
    target = registry if registry is not None else _registry
    count = target.load(DescriptorFileSpec.from_yaml_file(path).to_descriptors())
    logger.debug("registry.loaded", path=str(path), registered=count)
    return count


def clear_registry() -> None:
    """Clear the global registry (for testing)."""
    _registry.clear()
