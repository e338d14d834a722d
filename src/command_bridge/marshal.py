"""Positional JSON argument decoding against declared parameter types."""

from __future__ import annotations

import dataclasses
import enum
import math
import types
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal, Union, get_args, get_origin, get_type_hints

from command_bridge.errors import ArgumentCountMismatch, DecodingError, MissingArgument

_NONE_TYPE = type(None)
_ARRAY_ORIGINS = (list, set, frozenset, Sequence)
_MAP_ORIGINS = (dict, Mapping)


class TypeDecodeError(ValueError):
    """Raised when a JSON value does not match a type hint."""

    def __init__(self, reason: str, path: tuple[str | int, ...] = ()) -> None:
        super().__init__(reason)
        self.reason = reason
        self.path = path

    def nested(self, key: str | int) -> TypeDecodeError:
        """Return a copy of this error located one level deeper."""
        return TypeDecodeError(self.reason, (key, *self.path))

    def __str__(self) -> str:
        if not self.path:
            return self.reason
        rendered = "".join(f"[{key}]" if isinstance(key, int) else f".{key}" for key in self.path)
        return f"{self.reason} at ${rendered}"


def marshal_arguments(
    function_name: str,
    parameters: Sequence[Any],
    arguments: Sequence[object],
) -> tuple[object, ...]:
    """Decode positional JSON arguments, stopping at the first problem.

    ``parameters`` are ordered records exposing ``name``, ``position`` and
    ``annotation``. The argument count is checked before any value is decoded.
    """
    if len(arguments) != len(parameters):
        raise ArgumentCountMismatch(
            function=function_name,
            expected=len(parameters),
            actual=len(arguments),
        )

    decoded: list[object] = []
    for parameter in parameters:
        position = parameter.position
        if position >= len(arguments):
            raise MissingArgument(
                function=function_name,
                parameter=parameter.name,
                position=position,
            )
        try:
            decoded.append(decode_value(arguments[position], parameter.annotation))
        except TypeDecodeError as error:
            raise DecodingError(
                function=function_name,
                parameter=parameter.name,
                position=position,
                error=str(error),
            ) from error
    return tuple(decoded)


def decode_value(value: object, annotation: object) -> Any:
    """Convert one JSON value into ``annotation``, raising TypeDecodeError."""
    if annotation is Any or annotation is object:
        return value
    if annotation is None or annotation is _NONE_TYPE:
        if value is None:
            return None
        raise _invalid_type(value, "null")

    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin is Annotated:
        return decode_value(value, args[0])
    if origin is Union or origin is types.UnionType:
        return _decode_union(value, args)
    if origin is Literal:
        return _decode_literal(value, args)
    if origin is tuple:
        return _decode_tuple(value, args)
    if origin in _ARRAY_ORIGINS:
        item_type = args[0] if args else Any
        items = _decode_array(value, item_type)
        if origin is set:
            return set(items)
        if origin is frozenset:
            return frozenset(items)
        return items
    if origin in _MAP_ORIGINS:
        value_type = args[1] if len(args) == 2 else Any
        return _decode_map(value, value_type)

    if annotation is bool:
        if isinstance(value, bool):
            return value
        raise _invalid_type(value, "a boolean")
    if annotation is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise _invalid_type(value, "an integer")
    if annotation is float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise _invalid_type(value, "a number")
        try:
            number = float(value)
        except OverflowError as error:
            raise TypeDecodeError("invalid value: integer out of range, expected a number") from error
        if not math.isfinite(number):
            raise TypeDecodeError(f"invalid value: {describe_json(value)}, expected a finite number")
        return number
    if annotation is str:
        if isinstance(value, str):
            return value
        raise _invalid_type(value, "a string")
    if annotation is list or annotation is tuple:
        return annotation(_decode_array(value, Any))
    if annotation is dict:
        return _decode_map(value, Any)
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return _decode_enum(value, annotation)
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        return _decode_dataclass(value, annotation)
    raise TypeDecodeError(f"unsupported parameter type {_type_name(annotation)}")


def check_annotation(annotation: object) -> None:
    """Raise ValueError when ``annotation`` cannot be decoded from JSON."""
    if annotation is Any or annotation is object or annotation is None:
        return
    if annotation in (_NONE_TYPE, bool, int, float, str, list, tuple, dict):
        return
    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin is Annotated:
        check_annotation(args[0])
        return
    if origin is Literal:
        return
    if origin in (Union, types.UnionType, tuple, *_ARRAY_ORIGINS, *_MAP_ORIGINS):
        if origin in _MAP_ORIGINS and args and args[0] is not str:
            raise ValueError(f"Mapping keys must be str, got {_type_name(args[0])}.")
        for arg in args:
            if arg is not Ellipsis:
                check_annotation(arg)
        return
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        for field_type in _dataclass_field_types(annotation).values():
            check_annotation(field_type)
        return
    raise ValueError(f"Unsupported parameter type {_type_name(annotation)}.")


def describe_json(value: object) -> str:
    """Render a JSON value for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return f"boolean `{'true' if value else 'false'}`"
    if isinstance(value, int):
        return f"integer `{value}`"
    if isinstance(value, float):
        return f"floating point `{value}`"
    if isinstance(value, str):
        return f'string "{value}"'
    if isinstance(value, list):
        return "sequence"
    if isinstance(value, dict):
        return "map"
    return type(value).__name__


def _invalid_type(value: object, expected: str) -> TypeDecodeError:
    return TypeDecodeError(f"invalid type: {describe_json(value)}, expected {expected}")


def _decode_union(value: object, members: tuple[object, ...]) -> Any:
    if value is None and _NONE_TYPE in members:
        return None
    candidates = [member for member in members if member is not _NONE_TYPE]
    if len(candidates) == 1:
        return decode_value(value, candidates[0])
    for candidate in candidates:
        try:
            return decode_value(value, candidate)
        except TypeDecodeError:
            continue
    names = ", ".join(_type_name(member) for member in members)
    raise TypeDecodeError(f"{describe_json(value)} did not match any variant of {names}")


def _decode_literal(value: object, allowed: tuple[object, ...]) -> Any:
    for candidate in allowed:
        if type(candidate) is type(value) and candidate == value:
            return candidate
    rendered = ", ".join(repr(candidate) for candidate in allowed)
    raise TypeDecodeError(f"unknown variant {describe_json(value)}, expected one of {rendered}")


def _decode_array(value: object, item_type: object) -> list[Any]:
    if not isinstance(value, list):
        raise _invalid_type(value, "a sequence")
    items: list[Any] = []
    for index, item in enumerate(value):
        try:
            items.append(decode_value(item, item_type))
        except TypeDecodeError as error:
            raise error.nested(index) from error
    return items


def _decode_tuple(value: object, item_types: tuple[object, ...]) -> tuple[Any, ...]:
    if not item_types:
        return tuple(_decode_array(value, Any))
    if len(item_types) == 2 and item_types[1] is Ellipsis:
        return tuple(_decode_array(value, item_types[0]))
    if not isinstance(value, list):
        raise _invalid_type(value, f"a tuple of size {len(item_types)}")
    if len(value) != len(item_types):
        raise TypeDecodeError(
            f"invalid length {len(value)}, expected a tuple of size {len(item_types)}"
        )
    items: list[Any] = []
    for index, (item, item_type) in enumerate(zip(value, item_types)):
        try:
            items.append(decode_value(item, item_type))
        except TypeDecodeError as error:
            raise error.nested(index) from error
    return tuple(items)


def _decode_map(value: object, value_type: object) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise _invalid_type(value, "a map")
    decoded: dict[str, Any] = {}
    for key, item in value.items():
        try:
            decoded[key] = decode_value(item, value_type)
        except TypeDecodeError as error:
            raise error.nested(key) from error
    return decoded


def _decode_enum(value: object, enum_type: type[enum.Enum]) -> enum.Enum:
    for member in enum_type:
        if type(member.value) is type(value) and member.value == value:
            return member
    variants = ", ".join(repr(member.value) for member in enum_type)
    raise TypeDecodeError(f"unknown variant {describe_json(value)}, expected one of {variants}")


def _decode_dataclass(value: object, cls: type) -> Any:
    if not isinstance(value, dict):
        raise _invalid_type(value, f"struct {cls.__name__}")
    field_types = _dataclass_field_types(cls)
    kwargs: dict[str, Any] = {}
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        if field.name not in value:
            has_default = (
                field.default is not dataclasses.MISSING
                or field.default_factory is not dataclasses.MISSING
            )
            if has_default:
                continue
            if _accepts_null(field_types[field.name]):
                kwargs[field.name] = None
                continue
            raise TypeDecodeError(f"missing field `{field.name}`")
        try:
            kwargs[field.name] = decode_value(value[field.name], field_types[field.name])
        except TypeDecodeError as error:
            raise error.nested(field.name) from error
    return cls(**kwargs)


def _accepts_null(annotation: object) -> bool:
    if get_origin(annotation) is Annotated:
        return _accepts_null(get_args(annotation)[0])
    if get_origin(annotation) in (Union, types.UnionType):
        return _NONE_TYPE in get_args(annotation)
    return annotation is None or annotation is _NONE_TYPE or annotation is Any


def _dataclass_field_types(cls: type) -> dict[str, object]:
    hints = get_type_hints(cls, include_extras=True)
    return {
        field.name: hints.get(field.name, Any)
        for field in dataclasses.fields(cls)
        if field.init
    }


def _type_name(annotation: object) -> str:
    if annotation is _NONE_TYPE:
        return "None"
    if isinstance(annotation, type) and get_origin(annotation) is None:
        return annotation.__name__
    return repr(annotation)
