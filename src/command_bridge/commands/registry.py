"""Write-once command registry."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .descriptor import CommandDescriptor, CommandHandler, descriptor_of


class DuplicateCommandError(ValueError):
    """Raised when two commands are registered under the same name."""


class RegistryFrozenError(RuntimeError):
    """Raised when registering into a registry that already serves calls."""


@dataclass(slots=True)
class CommandRegistry:
    """In-memory command registry preserving deterministic insertion order."""

    _descriptors: dict[str, CommandDescriptor] = field(default_factory=dict)
    _frozen: bool = False

    def register(self, descriptor: CommandDescriptor) -> None:
        """Register a descriptor; names must be unique."""
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register '{descriptor.name}': registry is frozen."
            )
        if descriptor.name in self._descriptors:
            raise DuplicateCommandError(f"Command '{descriptor.name}' is already registered.")
        self._descriptors[descriptor.name] = descriptor

    def get(self, name: str) -> CommandDescriptor | None:
        """Return a descriptor by exact name."""
        return self._descriptors.get(name)

    def names(self) -> tuple[str, ...]:
        """Return registered command names in deterministic order."""
        return tuple(self._descriptors.keys())

    def freeze(self) -> None:
        """Reject any further registration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)


def build_registry(
    commands: Iterable[CommandDescriptor | CommandHandler],
) -> CommandRegistry:
    """Assemble a frozen registry from descriptors or ``@command`` functions."""
    registry = CommandRegistry()
    for item in commands:
        registry.register(descriptor_of(item))
    registry.freeze()
    return registry
