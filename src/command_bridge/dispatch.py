"""Name-based command dispatch producing a single call outcome."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from command_bridge.commands.registry import CommandRegistry
from command_bridge.errors import BridgeError, FunctionNotFound


@dataclass(slots=True, frozen=True)
class CallRequest:
    """One call-by-name request with positional JSON arguments."""

    command_name: str
    arguments: tuple[object, ...] = ()


@dataclass(slots=True, frozen=True)
class CallOutcome:
    """Either a JSON value or a structured error, never both."""

    value: object = None
    error: BridgeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: object) -> CallOutcome:
        return cls(value=value)

    @classmethod
    def failure(cls, error: BridgeError) -> CallOutcome:
        return cls(error=error)

    def unwrap(self) -> object:
        """Return the value or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value


class Dispatcher:
    """Resolves command names against a frozen registry and invokes them."""

    def __init__(self, registry: CommandRegistry) -> None:
        registry.freeze()
        self._registry = registry

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    async def dispatch(self, command_name: str, arguments: Sequence[object]) -> object:
        """Invoke ``command_name``; raises BridgeError on any call failure."""
        descriptor = self._registry.get(command_name)
        if descriptor is None:
            raise FunctionNotFound(function=command_name)
        return await descriptor.invoke(command_name, arguments)

    async def call(self, request: CallRequest) -> CallOutcome:
        """Dispatch ``request`` and fold call errors into the outcome."""
        try:
            value = await self.dispatch(request.command_name, request.arguments)
        except BridgeError as error:
            return CallOutcome.failure(error)
        return CallOutcome.success(value)
