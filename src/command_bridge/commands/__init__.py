"""Command descriptors and registration."""

from .descriptor import (
    CommandDescriptor,
    CommandHandler,
    Parameter,
    command,
    describe,
    descriptor_of,
)
from .registry import (
    CommandRegistry,
    DuplicateCommandError,
    RegistryFrozenError,
    build_registry,
)

__all__ = [
    "CommandDescriptor",
    "CommandHandler",
    "CommandRegistry",
    "DuplicateCommandError",
    "Parameter",
    "RegistryFrozenError",
    "build_registry",
    "command",
    "describe",
    "descriptor_of",
]
