"""
Attendance Validation (``workforce_modules.attendance.validation``).

Responsibility
--------------
Turns loosely-typed input (API payloads, CSV/JSON/XLSX rows) into typed
attendance values, and checks the rules every write must satisfy.  Every
failure raises ``ValidationError`` naming the offending field.

Architecture position
---------------------
**Modules layer** -- pure functions.  No I/O, no session; "today" is
passed in by the caller's clock.

Rules
-----
* ``status`` is one of PRESENT, ABSENT, LEAVE, HALF_DAY (case-insensitive;
  "half day" / "half-day" accepted).
* ``date`` is not in the future unless configured otherwise.
* check-in/out are only accepted for PRESENT and HALF_DAY.
* When both are given, ``check_out > check_in`` and the span does not
  exceed ``max_daily_hours``.
* Time-of-day values ("09:00") are combined with the row date, in UTC.
"""

from __future__ import annotations

import json
import re
from dataclasses import replace
from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

from workforce_kernel.exceptions import ValidationError
from workforce_modules.attendance.config import AttendanceConfig
from workforce_modules.attendance.models import AttendanceInput, AttendanceStatus, JobLink

HOURS_QUANTUM = Decimal("0.01")

# Canonical key -> accepted spellings, compared after normalization
# (lowercase, spaces / hyphens / underscores removed).
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "employee_id": ("employeeid",),
    "employee_code": ("employeecode", "empcode", "code"),
    "email": ("email", "employeeemail"),
    "date": ("date", "attendancedate"),
    "status": ("status",),
    "check_in": ("checkin", "intime", "timein"),
    "check_out": ("checkout", "outtime", "timeout"),
    "job_link": ("joblink",),
    "project_id": ("projectid", "project"),
    "job_id": ("jobid", "job"),
    "remarks": ("remarks", "remark", "notes"),
}

_ALIAS_LOOKUP = {
    alias: canonical
    for canonical, aliases in COLUMN_ALIASES.items()
    for alias in aliases
}

_TIME_OF_DAY = re.compile(r"^\d{1,2}:\d{2}(:\d{2})?$")


def _normalize_key(key: str) -> str:
    return re.sub(r"[\s_\-]", "", str(key)).lower()


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def canonicalize_row(row: Any) -> dict[str, Any]:
    """
    Map a raw row's column names onto canonical keys; unknown columns are dropped.

    Anything that is not a mapping is rejected.  Readers that could not decode
    a record pass a placeholder whose ``reason`` explains why.
    """
    if not isinstance(row, Mapping):
        reason = getattr(row, "reason", None)
        raise ValidationError("row", reason or f"must be an object, got {type(row).__name__}")
    out: dict[str, Any] = {}
    for key, value in row.items():
        canonical = _ALIAS_LOOKUP.get(_normalize_key(key))
        if canonical is not None and canonical not in out:
            out[canonical] = value.strip() if isinstance(value, str) else value
    return out


def parse_date(value: Any, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if _blank(value):
        raise ValidationError(field, "is required")
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(field, f"invalid date {value!r}, expected YYYY-MM-DD") from None


def parse_status(value: Any, default: AttendanceStatus | None = None) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    if _blank(value):
        if default is not None:
            return default
        raise ValidationError("status", "is required")
    normalized = re.sub(r"[\s\-]+", "_", str(value).strip()).upper()
    try:
        return AttendanceStatus(normalized)
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError("status", f"{value!r} is not one of {allowed}") from None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any, on_date: date, field: str) -> datetime | None:
    """Parse an ISO timestamp, a ``time`` or an ``HH:MM[:SS]`` string."""
    if _blank(value):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, time):
        return datetime.combine(on_date, value, tzinfo=timezone.utc)
    text = str(value).strip()
    try:
        if _TIME_OF_DAY.match(text):
            hh, rest = text.split(":", 1)
            clock_time = time.fromisoformat(f"{int(hh):02d}:{rest}")
            return datetime.combine(on_date, clock_time, tzinfo=timezone.utc)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return _as_utc(datetime.fromisoformat(text))
    except ValueError:
        raise ValidationError(field, f"invalid timestamp {value!r}") from None


def parse_job_link(row: Mapping[str, Any]) -> JobLink | None:
    """Job link from a ``job_link`` object / JSON string, or project_id / job_id columns."""
    raw = row.get("job_link")
    project_id = row.get("project_id")
    job_id = row.get("job_id")

    if isinstance(raw, JobLink):
        return raw
    if isinstance(raw, str) and raw.strip():
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationError("job_link", "must be a JSON object") from None
    if isinstance(raw, Mapping):
        project_id = raw.get("projectId", raw.get("project_id", project_id))
        job_id = raw.get("jobId", raw.get("job_id", job_id))
    elif not _blank(raw):
        raise ValidationError("job_link", "must be an object with projectId / jobId")

    project_id = None if _blank(project_id) else str(project_id).strip()
    job_id = None if _blank(job_id) else str(job_id).strip()
    if project_id is None and job_id is None:
        return None
    return JobLink(project_id=project_id, job_id=job_id)


def compute_hours(check_in: datetime | None, check_out: datetime | None) -> Decimal:
    """Worked hours, 0 when either end is missing; never negative."""
    if check_in is None or check_out is None:
        return Decimal("0")
    seconds = Decimal(int((check_out - check_in).total_seconds()))
    hours = max(Decimal("0"), seconds / Decimal(3600))
    return hours.quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)


def normalize_attendance(attendance: AttendanceInput) -> AttendanceInput:
    """Coerce the status to its enum and both timestamps to UTC (naive is read as UTC)."""
    return replace(
        attendance,
        status=parse_status(attendance.status),
        check_in=None if attendance.check_in is None else _as_utc(attendance.check_in),
        check_out=None if attendance.check_out is None else _as_utc(attendance.check_out),
    )


def validate_attendance(
    attendance: AttendanceInput,
    today: date,
    config: AttendanceConfig,
) -> Decimal:
    """
    Check the rules for one attendance write and return its hours.

    Raises:
        ValidationError: naming the field that broke a rule.
    """
    attendance = normalize_attendance(attendance)
    status = attendance.status

    if not config.allow_future_dates and attendance.date > today:
        raise ValidationError("date", f"{attendance.date} is in the future")

    has_times = attendance.check_in is not None or attendance.check_out is not None
    if has_times and not status.is_worked:
        raise ValidationError(
            "check_in",
            f"check-in/out not allowed for status {status.value}",
        )

    if attendance.check_in is not None and attendance.check_out is not None:
        if attendance.check_out <= attendance.check_in:
            raise ValidationError("check_out", "must be after check_in")
        hours = compute_hours(attendance.check_in, attendance.check_out)
        if hours > config.max_daily_hours:
            raise ValidationError(
                "check_out",
                f"{hours} hours exceeds the daily maximum of {config.max_daily_hours}",
            )
        return hours

    return Decimal("0")


def parse_attendance_row(
    row: Mapping[str, Any],
    employee_id,
    config: AttendanceConfig,
) -> AttendanceInput:
    """Build an ``AttendanceInput`` from a canonicalized bulk row."""
    on_date = parse_date(row.get("date"))
    status = parse_status(row.get("status"), default=AttendanceStatus(config.default_bulk_status))
    remarks = row.get("remarks")
    return AttendanceInput(
        employee_id=employee_id,
        date=on_date,
        status=status,
        check_in=parse_timestamp(row.get("check_in"), on_date, "check_in"),
        check_out=parse_timestamp(row.get("check_out"), on_date, "check_out"),
        job_link=parse_job_link(row),
        remarks=None if _blank(remarks) else str(remarks),
    )
