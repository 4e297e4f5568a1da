"""
Engine configuration schema.

Frozen dataclasses parsed from YAML by ``workforce_config.loader``.
Module sections reuse the modules' own config classes
(``AttendanceConfig``, ``PayrollConfig``) so each module keeps ownership
of its settings and validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from workforce_modules.attendance.config import AttendanceConfig
from workforce_modules.payroll.config import PayrollConfig

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings and storage timeouts."""

    url: str = "sqlite:///workforce.db"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 10
    pool_timeout: int = 30  # seconds waiting for a pooled connection
    pool_recycle: int = 1800
    lock_timeout_ms: int = 5000  # PostgreSQL only
    statement_timeout_ms: int = 30000  # PostgreSQL only
    sqlite_busy_timeout: float = 30.0  # seconds, SQLite only

    def __post_init__(self):
        if not self.url:
            raise ValueError("database.url is required")
        if self.pool_size < 1:
            raise ValueError("database.pool_size must be at least 1")
        if self.max_overflow < 0:
            raise ValueError("database.max_overflow cannot be negative")
        for name in ("pool_timeout", "lock_timeout_ms", "statement_timeout_ms", "sqlite_busy_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"database.{name} must be positive")


@dataclass(frozen=True)
class BatchConfig:
    """Fan-out limits shared by bulk ingestion and payroll generation."""

    max_workers: int = 4
    bulk_deadline_seconds: float | None = None
    generation_deadline_seconds: float | None = None

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError("batch.max_workers must be at least 1")
        for name in ("bulk_deadline_seconds", "generation_deadline_seconds"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"batch.{name} must be positive")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"

    def __post_init__(self):
        if self.level.upper() not in _LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {_LOG_LEVELS}")


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfig:
    """Everything ``WorkforceEngine.from_config`` needs."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    attendance: AttendanceConfig = field(default_factory=AttendanceConfig)
    payroll: PayrollConfig = field(default_factory=PayrollConfig)
    checksum: str | None = None
