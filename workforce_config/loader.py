"""
Configuration Loader (``workforce_config.loader``).

Responsibility
--------------
Loads a YAML file and parses it into a validated ``EngineConfig``.
Callers normally go through ``workforce_config.get_active_config()``,
which also applies environment overrides.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section or key  -> ``ValueError`` naming it.
* Invalid value  -> ``ValueError`` from the section's ``__post_init__``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from workforce_config.schema import BatchConfig, DatabaseConfig, EngineConfig, LoggingConfig
from workforce_modules.attendance.config import AttendanceConfig
from workforce_modules.payroll.config import PayrollConfig

_SECTIONS = ("database", "batch", "logging", "attendance", "payroll")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the parsed YAML, for config identity in logs."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _check_keys(section: str, data: dict[str, Any], cls: type) -> None:
    allowed = {f.name for f in fields(cls)}
    unknown = set(data) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in '{section}': {sorted(unknown)}")


def _simple_section(section: str, data: dict[str, Any], cls: type):
    _check_keys(section, data, cls)
    return cls(**data)


def parse_engine_config(data: dict[str, Any]) -> EngineConfig:
    """Build an ``EngineConfig`` from a parsed YAML mapping."""
    unknown = set(data) - set(_SECTIONS)
    if unknown:
        raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

    attendance = data.get("attendance") or {}
    payroll = data.get("payroll") or {}
    _check_keys("attendance", attendance, AttendanceConfig)
    _check_keys("payroll", payroll, PayrollConfig)

    return EngineConfig(
        database=_simple_section("database", data.get("database") or {}, DatabaseConfig),
        batch=_simple_section("batch", data.get("batch") or {}, BatchConfig),
        logging=_simple_section("logging", data.get("logging") or {}, LoggingConfig),
        attendance=AttendanceConfig.from_dict(attendance),
        payroll=PayrollConfig.from_dict(payroll),
        checksum=compute_checksum(data),
    )


def load_config(path: Path | str) -> EngineConfig:
    return parse_engine_config(load_yaml_file(Path(path)))
