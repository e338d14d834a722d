"""Process entrypoint: one command name in, one JSON result out."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import math
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from command_bridge.commands.demo import build_demo_registry
from command_bridge.commands.registry import CommandRegistry
from command_bridge.config import BridgeConfig, CliOverrides, load_effective_config
from command_bridge.dispatch import CallOutcome, CallRequest, Dispatcher
from command_bridge.errors import BridgeError, JsonError
from command_bridge.logging import AuditEvent, JsonlAuditLogger, sanitize_arguments, utc_timestamp

EXIT_OK = 0
EXIT_CALL_ERROR = 1
EXIT_USAGE = 2

INTERNAL_ERROR_CODE = "INTERNAL_ERROR"


def build_arg_parser(prog: str | None = None) -> argparse.ArgumentParser:
    """Build argument parser for a single call."""
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Invoke a registered command with a JSON argument array read from stdin.",
    )
    parser.add_argument("command", nargs="?", default=None)
    parser.add_argument("--config", required=False, default=None)
    parser.add_argument("--audit-log", required=False, default=None)
    parser.add_argument("--max-input-bytes", type=int, required=False, default=None)
    return parser


def read_input(in_stream: TextIO) -> str:
    """Read the whole input channel, mapping read failures to JsonError."""
    try:
        return in_stream.read()
    except (UnicodeDecodeError, OSError) as error:
        raise JsonError(error=f"Failed to read from stdin: {error}") from error


def _reject_constant(token: str) -> object:
    raise ValueError(f"invalid number `{token}`")


def _finite_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"number out of range `{token}`")
    return value


def parse_arguments(raw: str, max_input_bytes: int) -> list[object]:
    """Parse the raw input channel into a positional argument list.

    Only standard JSON is accepted: `NaN`, `Infinity` and numbers that overflow
    a float are rejected.
    """
    if len(raw.encode("utf-8")) > max_input_bytes:
        raise JsonError(error=f"Input exceeds max_input_bytes limit of {max_input_bytes} bytes")
    if not raw.strip():
        return []
    try:
        payload = json.loads(raw, parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError as error:
        raise JsonError(error=f"Failed to parse JSON arguments: {error}") from error
    if not isinstance(payload, list):
        raise JsonError(error="Failed to parse JSON arguments: expected a JSON array")
    return payload


class CallDriver:
    """Runs exactly one call and externalizes its outcome."""

    def __init__(self, registry: CommandRegistry, config: BridgeConfig) -> None:
        self._dispatcher = Dispatcher(registry)
        self._config = config
        self._audit_logger: JsonlAuditLogger | None = None
        if config.audit.path is not None:
            self._audit_logger = JsonlAuditLogger(path=config.audit.path)

    def run(
        self,
        command_name: str,
        in_stream: TextIO,
        out_stream: TextIO,
        err_stream: TextIO,
    ) -> int:
        """Read arguments, dispatch once, write the result; return exit status."""
        started = time.perf_counter()
        try:
            raw = read_input(in_stream)
            arguments = parse_arguments(raw, self._config.limits.max_input_bytes)
        except JsonError as error:
            return self.report_error(command_name, [], error, err_stream, started)

        request = CallRequest(command_name=command_name, arguments=tuple(arguments))
        try:
            outcome = asyncio.run(self._dispatcher.call(request))
        except Exception as error:
            err_stream.write(
                "Error: Unhandled error while executing command: "
                f"{type(error).__name__}: {error}\n"
            )
            err_stream.flush()
            self.log_call(command_name, arguments, INTERNAL_ERROR_CODE, started)
            return EXIT_CALL_ERROR

        if outcome.error is not None:
            return self.report_error(command_name, arguments, outcome.error, err_stream, started)
        out_stream.write(f"{render_result(outcome)}\n")
        out_stream.flush()
        self.log_call(command_name, arguments, None, started)
        return EXIT_OK

    def report_error(
        self,
        command_name: str,
        arguments: Sequence[object],
        error: BridgeError,
        err_stream: TextIO,
        started: float,
    ) -> int:
        """Render a call error for humans."""
        err_stream.write(f"Error: {error}\n")
        err_stream.flush()
        self.log_call(command_name, arguments, error.code, started)
        return EXIT_CALL_ERROR

    def log_call(
        self,
        command_name: str,
        arguments: Sequence[object],
        error_code: str | None,
        started: float,
    ) -> None:
        """Log one sanitized call event when audit logging is enabled."""
        if self._audit_logger is None:
            return
        event = AuditEvent(
            timestamp=utc_timestamp(),
            command=command_name,
            ok=error_code is None,
            error_code=error_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 3),
            metadata=sanitize_arguments(arguments),
        )
        self._audit_logger.append(event)


def render_result(outcome: CallOutcome) -> str:
    """Serialize a successful outcome as a single compact JSON line."""
    return json.dumps(outcome.unwrap(), separators=(",", ":"))


def run_call(
    registry: CommandRegistry,
    argv: Sequence[str] | None,
    in_stream: TextIO,
    out_stream: TextIO,
    err_stream: TextIO,
    prog: str | None = None,
    working_dir: Path | None = None,
) -> int:
    """Parse argv, load config and run one call against ``registry``."""
    parser = build_arg_parser(prog)
    try:
        with contextlib.redirect_stdout(out_stream), contextlib.redirect_stderr(err_stream):
            args = parser.parse_args(argv)
    except SystemExit as exit_request:
        err_stream.flush()
        return exit_request.code if isinstance(exit_request.code, int) else EXIT_USAGE
    if args.command is None:
        err_stream.write(parser.format_usage())
        err_stream.write(f"{parser.prog}: error: a command name is required\n")
        err_stream.flush()
        return EXIT_USAGE

    overrides = CliOverrides(
        max_input_bytes=args.max_input_bytes,
        audit_log_path=Path(args.audit_log) if args.audit_log is not None else None,
    )
    try:
        config = load_effective_config(
            working_dir or Path.cwd(),
            config_path=Path(args.config) if args.config is not None else None,
            overrides=overrides,
        )
    except ValueError as error:
        err_stream.write(f"Error: Invalid configuration: {error}\n")
        err_stream.flush()
        return EXIT_USAGE

    driver = CallDriver(registry, config)
    return driver.run(args.command, in_stream, out_stream, err_stream)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the demo command process."""
    return run_call(
        build_demo_registry(),
        argv,
        sys.stdin,
        sys.stdout,
        sys.stderr,
        prog="command-bridge-demo",
    )


if __name__ == "__main__":
    raise SystemExit(main())
