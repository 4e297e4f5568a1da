"""Attendance import services."""

from workforce_ingestion.services.attendance_import_service import AttendanceImportService

__all__ = ["AttendanceImportService"]
