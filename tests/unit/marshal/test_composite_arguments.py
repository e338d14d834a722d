from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from command_bridge.commands import describe
from command_bridge.errors import DecodingError
from command_bridge.marshal import TypeDecodeError, decode_value, marshal_arguments


@dataclass
class Swatch:
    name: str
    weights: list[float]
    note: str | None
    tags: list[str] = field(default_factory=list)


def greetings(names: list[str]) -> list[str]:
    return names


def paint(swatch: Swatch, coats: int) -> str:
    return swatch.name


def test_arrays_decode_element_wise() -> None:
    assert decode_value(["a", "b"], list[str]) == ["a", "b"]
    assert decode_value([1, 2, 2], set[int]) == {1, 2}
    assert decode_value([1, 2], tuple[int, ...]) == (1, 2)
    assert decode_value([1, "x"], tuple[int, str]) == (1, "x")


def test_fixed_tuple_length_is_enforced() -> None:
    with pytest.raises(TypeDecodeError, match="invalid length 1, expected a tuple of size 2"):
        decode_value([1], tuple[int, str])


def test_maps_decode_values() -> None:
    assert decode_value({"a": 1, "b": 2}, dict[str, int]) == {"a": 1, "b": 2}


def test_dataclass_decodes_from_object_ignoring_unknown_keys() -> None:
    swatch = decode_value(
        {"name": "teal", "weights": [1, 0.5], "extra": True},
        Swatch,
    )

    assert swatch == Swatch(name="teal", weights=[1.0, 0.5], note=None, tags=[])


def test_dataclass_requires_fields_without_defaults() -> None:
    with pytest.raises(TypeDecodeError, match="missing field `weights`"):
        decode_value({"name": "teal"}, Swatch)


def test_inner_failure_is_reported_against_argument_position() -> None:
    parameters = describe(greetings).parameters

    with pytest.raises(DecodingError) as excinfo:
        marshal_arguments("greetings", parameters, [["Ada", 1, None]])

    error = excinfo.value
    assert error.parameter == "names"
    assert error.position == 0
    assert error.error == "invalid type: integer `1`, expected a string at $[1]"


def test_nested_dataclass_failure_names_path() -> None:
    parameters = describe(paint).parameters

    with pytest.raises(DecodingError) as excinfo:
        marshal_arguments("paint", parameters, [{"name": "teal", "weights": [1, "x"]}, "two"])

    error = excinfo.value
    assert error.parameter == "swatch"
    assert error.position == 0
    assert error.error == 'invalid type: string "x", expected a number at $.weights[1]'


def test_decoding_stops_at_first_bad_position() -> None:
    parameters = describe(paint).parameters

    with pytest.raises(DecodingError) as excinfo:
        marshal_arguments("paint", parameters, [{"name": 5}, "two"])

    assert excinfo.value.position == 0
    assert "coats" not in str(excinfo.value)
