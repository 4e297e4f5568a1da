"""
Workforce Kernel

Shared infrastructure for the attendance and payroll engine:
- Durable storage with uniqueness-backed idempotency
- Transaction helpers with conflict re-read and bounded timeouts
- Append-only audit trail
- Structured JSON logging
- Typed error hierarchy
"""

__version__ = "0.1.0"
