"""
workforce_ingestion -- attendance file import.

Reads CSV, JSON and XLSX attendance sheets into row dicts and hands them
to ``AttendanceIngestor.bulk_ingest``.

Architecture:
    workforce_ingestion/ is a top-level package.  Adapters do file I/O
    only; the import service is the single place that reaches into
    ``workforce_modules``.  Nothing in kernel/ or modules/ imports from
    ingestion.
"""
