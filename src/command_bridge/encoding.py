"""Handler output encoding to JSON-compatible values."""

from __future__ import annotations

import dataclasses
import enum
import math
from collections.abc import Mapping

from command_bridge.errors import ExecutionError


def to_json_value(value: object) -> object:
    """Convert a handler result into plain JSON data.

    Dataclasses become objects in field order, enums collapse to their values,
    tuples and sets become arrays. Anything else raises TypeError or ValueError.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"float value {value!r} is not representable in JSON")
        return value
    if isinstance(value, enum.Enum):
        return to_json_value(value.value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: to_json_value(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        encoded: dict[str, object] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"map key {key!r} must be a string")
            encoded[key] = to_json_value(item)
        return encoded
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json_value(item) for item in value]
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_result(value: object) -> object:
    """Encode a successful handler output, raising ExecutionError on failure."""
    try:
        return to_json_value(value)
    except (TypeError, ValueError) as error:
        raise ExecutionError(error=f"Failed to serialize result: {error}") from error
