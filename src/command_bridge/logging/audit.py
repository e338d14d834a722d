"""Structured JSONL audit log utilities."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Sanitized representation of a single command call."""

    timestamp: str
    command: str
    ok: bool
    error_code: str | None
    duration_ms: float
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: Sequence[object]) -> dict[str, object]:
    """Summarize positional arguments without logging free-form content."""
    summaries: list[dict[str, object]] = []
    for value in arguments:
        if isinstance(value, bool):
            summaries.append({"type": "boolean", "value": value})
            continue
        if isinstance(value, (int, float)):
            summaries.append({"type": "number", "value": value})
            continue
        if value is None:
            summaries.append({"type": "null"})
            continue
        if isinstance(value, str):
            summaries.append({"type": "string", "length": len(value)})
            continue
        if isinstance(value, list):
            summaries.append({"type": "array", "length": len(value)})
            continue
        if isinstance(value, dict):
            summaries.append({"type": "object", "keys": sorted(str(k) for k in value.keys())})
            continue
        summaries.append({"type": type(value).__name__})
    return {"argument_count": len(arguments), "arguments": summaries}


class JsonlAuditLogger:
    """Append-only JSONL audit logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append a sanitized event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if since is not None:
                    ts = record.get("timestamp")
                    if not isinstance(ts, str) or ts < since:
                        continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]
