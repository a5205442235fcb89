"""Audit logging adapters."""

from betterdoc.adapters.audit.memory import InMemoryAuditLog
from betterdoc.adapters.audit.repository import AuditRepository
from betterdoc.adapters.audit.types import AuditLogCreate, AuditLogEntry

__all__ = [
    "AuditLogCreate",
    "AuditLogEntry",
    "AuditRepository",
    "InMemoryAuditLog",
]
