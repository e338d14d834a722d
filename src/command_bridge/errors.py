"""Call-scoped error taxonomy shared by the marshaler, dispatcher and driver."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import ClassVar


class BridgeError(Exception):
    """Base class for every error a single call can end with."""

    code: ClassVar[str] = "BRIDGE_ERROR"

    @property
    def message(self) -> str:
        return "Command bridge error"

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-compatible description of the error."""
        payload: dict[str, object] = {"code": self.code, "message": self.message}
        payload.update(asdict(self))
        return payload

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True, frozen=True)
class MissingArgument(BridgeError):
    """A declared parameter position has no supplied value."""

    code: ClassVar[str] = "MISSING_ARGUMENT"

    function: str
    parameter: str
    position: int

    @property
    def message(self) -> str:
        return (
            f"Missing argument for function '{self.function}', "
            f"parameter '{self.parameter}' at position {self.position}"
        )


@dataclass(slots=True, frozen=True)
class ArgumentCountMismatch(BridgeError):
    """Supplied argument count differs from the declared parameter count."""

    code: ClassVar[str] = "ARGUMENT_COUNT_MISMATCH"

    function: str
    expected: int
    actual: int

    @property
    def message(self) -> str:
        return (
            f"Argument count mismatch for function '{self.function}': "
            f"expected {self.expected}, got {self.actual}"
        )


@dataclass(slots=True, frozen=True)
class DecodingError(BridgeError):
    """A supplied JSON value could not be converted to the declared type."""

    code: ClassVar[str] = "DECODING_ERROR"

    function: str
    parameter: str
    position: int
    error: str

    @property
    def message(self) -> str:
        return (
            f"Failed to decode parameter '{self.parameter}' at position {self.position} "
            f"for function '{self.function}': {self.error}"
        )


@dataclass(slots=True, frozen=True)
class FunctionNotFound(BridgeError):
    """No registered command matches the requested name."""

    code: ClassVar[str] = "FUNCTION_NOT_FOUND"

    function: str

    @property
    def message(self) -> str:
        return f"Function '{self.function}' not found"


@dataclass(slots=True, frozen=True)
class ExecutionError(BridgeError):
    """The handler failed, or its output could not be encoded to JSON."""

    code: ClassVar[str] = "EXECUTION_ERROR"

    error: str

    @property
    def message(self) -> str:
        return f"Function execution failed: {self.error}"


@dataclass(slots=True, frozen=True)
class JsonError(BridgeError):
    """The argument input could not be read as a JSON array."""

    code: ClassVar[str] = "JSON_ERROR"

    error: str

    @property
    def message(self) -> str:
        return f"JSON parsing error: {self.error}"
