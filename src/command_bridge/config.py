"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "command_bridge.toml"
DEFAULT_MAX_INPUT_BYTES = 1024 * 1024
MAX_INPUT_BYTES_CAP = 16 * 1024 * 1024


@dataclass(slots=True, frozen=True)
class BridgeLimits:
    """Limits applied to a single call."""

    max_input_bytes: int = DEFAULT_MAX_INPUT_BYTES


@dataclass(slots=True, frozen=True)
class AuditConfig:
    """Audit log settings; a missing path disables audit logging."""

    path: Path | None = None


@dataclass(slots=True, frozen=True)
class BridgeConfig:
    """Fully merged bridge configuration."""

    limits: BridgeLimits
    audit: AuditConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for diagnostics."""
        return {
            "limits": {
                "max_input_bytes": self.limits.max_input_bytes,
            },
            "audit": {
                "path": str(self.audit.path) if self.audit.path is not None else None,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    max_input_bytes: int | None = None
    audit_log_path: Path | None = None


def default_config() -> BridgeConfig:
    """Build the default configuration."""
    return BridgeConfig(limits=BridgeLimits(), audit=AuditConfig())


def load_config_file(path: Path, required: bool = False) -> dict[str, object]:
    """Load a TOML config file; a missing optional file yields an empty table."""
    if not path.exists():
        if required:
            raise ValueError(f"Config file not found: {path}")
        return {}
    with path.open("rb") as handle:
        try:
            payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as error:
            raise ValueError(f"Config file {path.name} is not valid TOML: {error}") from error
    if not isinstance(payload, dict):
        raise ValueError(f"{path.name} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def merge_config(
    base: BridgeConfig,
    file_payload: dict[str, object],
    overrides: CliOverrides,
    base_dir: Path,
) -> BridgeConfig:
    """Merge defaults, config file, then CLI/startup overrides.

    Relative paths in the file are resolved against ``base_dir``.
    """
    limits_payload = _get_table(file_payload, "limits")
    audit_payload = _get_table(file_payload, "audit")

    max_input_bytes = _optional_positive_int_with_cap(
        limits_payload.get("max_input_bytes"),
        "limits.max_input_bytes",
        base.limits.max_input_bytes,
        MAX_INPUT_BYTES_CAP,
    )

    audit_path = base.audit.path
    if "path" in audit_payload:
        raw_path = audit_payload["path"]
        if not isinstance(raw_path, str) or not raw_path:
            raise ValueError("Config field 'audit.path' must be a non-empty string.")
        audit_path = (base_dir / raw_path).resolve()
    if "enabled" in audit_payload:
        enabled = audit_payload["enabled"]
        if not isinstance(enabled, bool):
            raise ValueError("Config field 'audit.enabled' must be a boolean.")
        if not enabled:
            audit_path = None

    merged = BridgeConfig(
        limits=BridgeLimits(max_input_bytes=max_input_bytes),
        audit=AuditConfig(path=audit_path),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: BridgeConfig, overrides: CliOverrides) -> BridgeConfig:
    """Apply startup overrides at highest precedence."""
    max_input_bytes = _optional_positive_int_with_cap(
        overrides.max_input_bytes,
        "overrides.max_input_bytes",
        config.limits.max_input_bytes,
        MAX_INPUT_BYTES_CAP,
    )
    audit_path = config.audit.path
    if overrides.audit_log_path is not None:
        audit_path = overrides.audit_log_path.resolve()
    return BridgeConfig(
        limits=BridgeLimits(max_input_bytes=max_input_bytes),
        audit=AuditConfig(path=audit_path),
    )


def load_effective_config(
    working_dir: Path,
    config_path: Path | None = None,
    overrides: CliOverrides | None = None,
) -> BridgeConfig:
    """Load effective config using merge order defaults -> file -> overrides.

    Without an explicit ``config_path`` an optional ``command_bridge.toml`` in
    ``working_dir`` is used.
    """
    if config_path is not None:
        resolved = config_path.resolve()
        payload = load_config_file(resolved, required=True)
    else:
        resolved = (working_dir / CONFIG_FILE_NAME).resolve()
        payload = load_config_file(resolved)
    return merge_config(default_config(), payload, overrides or CliOverrides(), resolved.parent)


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
