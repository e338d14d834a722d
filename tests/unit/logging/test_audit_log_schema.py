from __future__ import annotations

import json
from pathlib import Path

from command_bridge.logging import AuditEvent, JsonlAuditLogger


def _event(timestamp: str, command: str = "greeting") -> AuditEvent:
    return AuditEvent(
        timestamp=timestamp,
        command=command,
        ok=True,
        error_code=None,
        duration_ms=1.5,
        metadata={"argument_count": 0, "arguments": []},
    )


def test_audit_log_writes_jsonl_schema(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(path=tmp_path / "nested" / "audit.jsonl")
    logger.append(_event("2026-01-01T00:00:00.000Z"))

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    event = json.loads(lines[0])

    assert set(event.keys()) == {
        "command",
        "duration_ms",
        "error_code",
        "metadata",
        "ok",
        "timestamp",
    }
    assert event["command"] == "greeting"


def test_read_filters_by_timestamp_and_limit(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(path=tmp_path / "audit.jsonl")
    for index in range(4):
        logger.append(_event(f"2026-01-0{index + 1}T00:00:00.000Z", command=f"c{index}"))
    with logger.path.open("a", encoding="utf-8") as handle:
        handle.write("not-json\n\n")

    recent = logger.read(since="2026-01-02T00:00:00.000Z", limit=2)

    assert [entry["command"] for entry in recent] == ["c2", "c3"]
    assert logger.read(limit=0) == []
