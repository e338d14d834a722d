from __future__ import annotations

import io
from pathlib import Path

from command_bridge.commands.demo import build_demo_registry
from command_bridge.driver import run_call
from command_bridge.logging import JsonlAuditLogger


def _run(tmp_path: Path, argv: list[str], stdin: str) -> int:
    return run_call(
        build_demo_registry(),
        argv,
        io.StringIO(stdin),
        io.StringIO(),
        io.StringIO(),
        working_dir=tmp_path,
    )


def test_audit_log_records_success_and_failure(tmp_path: Path) -> None:
    audit_path = tmp_path / "audit" / "calls.jsonl"

    _run(tmp_path, ["greeting", "--audit-log", str(audit_path)], '["Ada", true]')
    _run(tmp_path, ["pick_color", "--audit-log", str(audit_path)], '["teal"]')
    _run(tmp_path, ["unknown_cmd", "--audit-log", str(audit_path)], "[]")

    entries = JsonlAuditLogger(path=audit_path).read()

    assert [entry["command"] for entry in entries] == ["greeting", "pick_color", "unknown_cmd"]
    assert [entry["ok"] for entry in entries] == [True, False, False]
    assert [entry["error_code"] for entry in entries] == [
        None,
        "EXECUTION_ERROR",
        "FUNCTION_NOT_FOUND",
    ]
    assert entries[0]["metadata"] == {
        "argument_count": 2,
        "arguments": [
            {"type": "string", "length": 3},
            {"type": "boolean", "value": True},
        ],
    }
    assert all(entry["duration_ms"] >= 0 for entry in entries)


def test_audit_log_configured_from_file(tmp_path: Path) -> None:
    (tmp_path / "command_bridge.toml").write_text(
        '[audit]\npath = "bridge-audit.jsonl"\n', encoding="utf-8"
    )

    _run(tmp_path, ["noop"], "")

    entries = JsonlAuditLogger(path=tmp_path / "bridge-audit.jsonl").read()
    assert len(entries) == 1
    assert entries[0]["command"] == "noop"


def test_audit_log_disabled_by_default(tmp_path: Path) -> None:
    _run(tmp_path, ["noop"], "")

    assert list(tmp_path.iterdir()) == []
