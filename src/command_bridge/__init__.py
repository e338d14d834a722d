"""Call-by-name bridge between a host process and local command handlers."""

from .commands import CommandDescriptor, CommandRegistry, build_registry, command, describe
from .dispatch import CallOutcome, CallRequest, Dispatcher
from .errors import (
    ArgumentCountMismatch,
    BridgeError,
    DecodingError,
    ExecutionError,
    FunctionNotFound,
    JsonError,
    MissingArgument,
)

__all__ = [
    "ArgumentCountMismatch",
    "BridgeError",
    "CallOutcome",
    "CallRequest",
    "CommandDescriptor",
    "CommandRegistry",
    "DecodingError",
    "Dispatcher",
    "ExecutionError",
    "FunctionNotFound",
    "JsonError",
    "MissingArgument",
    "build_registry",
    "command",
    "describe",
]
