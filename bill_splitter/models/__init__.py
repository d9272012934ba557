"""
Data Models Package

This package contains all Pydantic models used by Bill Splitter.
All data flowing through the engine must conform to these schemas.
"""

from bill_splitter.models.bill import (
    BillState,
    BillSummary,
    BillTotals,
    Item,
    ItemSplit,
    ItemUpdate,
    Person,
    PersonBillShare,
    PersonUpdate,
    StoredBillState,
    TipMode,
)
from bill_splitter.models.operations import (
    OperationResult,
    Rejection,
    RejectionCode,
)
from bill_splitter.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Bill models
    "BillState",
    "BillSummary",
    "BillTotals",
    "Item",
    "ItemSplit",
    "ItemUpdate",
    "Person",
    "PersonBillShare",
    "PersonUpdate",
    "StoredBillState",
    "TipMode",
    # Operation results
    "OperationResult",
    "Rejection",
    "RejectionCode",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
