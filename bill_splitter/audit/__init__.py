"""Audit logging package."""

from bill_splitter.audit.logger import AuditLogger, AuditSink, create_correlation_id

__all__ = ["AuditLogger", "AuditSink", "create_correlation_id"]
