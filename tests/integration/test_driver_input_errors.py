from __future__ import annotations

import io
from pathlib import Path

import pytest

from command_bridge.commands import CommandRegistry, build_registry, command
from command_bridge.commands.demo import build_demo_registry
from command_bridge.driver import EXIT_CALL_ERROR, EXIT_USAGE, parse_arguments, run_call


@command
def crash() -> int:
    raise RuntimeError("disk on fire")


def _run(
    tmp_path: Path,
    argv: list[str],
    stdin: str,
    registry: CommandRegistry | None = None,
) -> tuple[int, str, str]:
    out_stream = io.StringIO()
    err_stream = io.StringIO()
    status = run_call(
        registry if registry is not None else build_demo_registry(),
        argv,
        io.StringIO(stdin),
        out_stream,
        err_stream,
        prog="bridge",
        working_dir=tmp_path,
    )
    return status, out_stream.getvalue(), err_stream.getvalue()


def test_missing_command_name_is_usage_error(tmp_path: Path) -> None:
    status, out, err = _run(tmp_path, [], '["Ada", true]')

    assert status == EXIT_USAGE
    assert out == ""
    assert err.startswith("usage: bridge")
    assert "a command name is required" in err


def test_malformed_json_is_json_error(tmp_path: Path) -> None:
    status, out, err = _run(tmp_path, ["greeting"], '["Ada", tru')

    assert status == EXIT_CALL_ERROR
    assert out == ""
    assert err.startswith("Error: JSON parsing error: Failed to parse JSON arguments:")


def test_non_array_input_is_json_error(tmp_path: Path) -> None:
    status, _, err = _run(tmp_path, ["greeting"], '{"name": "Ada"}')

    assert status == EXIT_CALL_ERROR
    assert err == (
        "Error: JSON parsing error: Failed to parse JSON arguments: expected a JSON array\n"
    )


def test_oversized_input_is_json_error(tmp_path: Path) -> None:
    status, _, err = _run(tmp_path, ["greeting", "--max-input-bytes", "4"], '["Ada", true]')

    assert status == EXIT_CALL_ERROR
    assert err == "Error: JSON parsing error: Input exceeds max_input_bytes limit of 4 bytes\n"


def test_invalid_configuration_stops_before_dispatch(tmp_path: Path) -> None:
    status, out, err = _run(tmp_path, ["noop", "--config", str(tmp_path / "absent.toml")], "")

    assert status == EXIT_USAGE
    assert out == ""
    assert err.startswith("Error: Invalid configuration: Config file not found")


def test_unhandled_handler_exception_is_reported(tmp_path: Path) -> None:
    status, out, err = _run(tmp_path, ["crash"], "", registry=build_registry([crash]))

    assert status == EXIT_CALL_ERROR
    assert out == ""
    assert err == (
        "Error: Unhandled error while executing command: RuntimeError: disk on fire\n"
    )


def test_parse_arguments_accepts_any_json_values() -> None:
    assert parse_arguments('[1, "a", null, [true], {"k": 2.5}]', 1024) == [
        1,
        "a",
        None,
        [True],
        {"k": 2.5},
    ]


def test_integer_literal_over_digit_limit_is_json_error(tmp_path: Path) -> None:
    status, out, err = _run(tmp_path, ["greetings"], "[" + "1" * 5000 + "]")

    assert status == EXIT_CALL_ERROR
    assert out == ""
    assert err.startswith("Error: JSON parsing error: Failed to parse JSON arguments:")


def test_undecodable_stdin_bytes_are_json_error(tmp_path: Path) -> None:
    in_stream = io.TextIOWrapper(io.BytesIO(b'["\xff\xfe", true]'), encoding="utf-8")
    out_stream = io.StringIO()
    err_stream = io.StringIO()

    status = run_call(
        build_demo_registry(),
        ["greeting"],
        in_stream,
        out_stream,
        err_stream,
        working_dir=tmp_path,
    )

    assert status == EXIT_CALL_ERROR
    assert out_stream.getvalue() == ""
    assert err_stream.getvalue().startswith("Error: JSON parsing error: Failed to read from stdin:")


def test_non_standard_number_constants_are_json_error(tmp_path: Path) -> None:
    for stdin in ('["Ada", NaN]', '["Ada", Infinity]', '["Ada", -Infinity]'):
        status, out, err = _run(tmp_path, ["delayed_greeting"], stdin)

        assert status == EXIT_CALL_ERROR
        assert out == ""
        assert err.startswith("Error: JSON parsing error: Failed to parse JSON arguments:")


def test_float_literal_overflow_is_json_error(tmp_path: Path) -> None:
    status, out, err = _run(tmp_path, ["delayed_greeting"], '["Ada", 1e999]')

    assert status == EXIT_CALL_ERROR
    assert out == ""
    assert "number out of range" in err


def test_integer_too_large_for_float_parameter_is_decoding_error(tmp_path: Path) -> None:
    status, _, err = _run(tmp_path, ["delayed_greeting"], '["Ada", ' + "9" * 400 + "]")

    assert status == EXIT_CALL_ERROR
    assert err == (
        "Error: Failed to decode parameter 'seconds' at position 1 for function "
        "'delayed_greeting': invalid value: integer out of range, expected a number\n"
    )


def test_invalid_option_value_is_written_to_error_stream(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    status, out, err = _run(tmp_path, ["greeting", "--max-input-bytes", "abc"], "[]")

    assert status == EXIT_USAGE
    assert out == ""
    assert "invalid int value: 'abc'" in err
    assert capsys.readouterr().err == ""


def test_extra_positional_argument_is_usage_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    status, out, err = _run(tmp_path, ["greeting", "extra"], "[]")

    assert status == EXIT_USAGE
    assert out == ""
    assert "unrecognized arguments: extra" in err
    assert capsys.readouterr().err == ""
