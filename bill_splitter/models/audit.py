"""
Audit Models for Bill Splitter

Every state change, rejection and snapshot read/write is logged.
This provides:
1. A trace of how a bill reached its current state
2. Debugging information when an edit "did nothing"
3. Visibility into snapshot migrations and fallbacks

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from bill_splitter.models.operations import OperationResult


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # State engine
    OPERATION_APPLIED = "operation_applied"
    OPERATION_REJECTED = "operation_rejected"

    # Snapshot lifecycle
    SNAPSHOT_LOADED = "snapshot_loaded"
    SNAPSHOT_MIGRATED = "snapshot_migrated"
    MIGRATION_FALLBACK = "migration_fallback"
    SNAPSHOT_SAVED = "snapshot_saved"
    SAVE_FAILED = "save_failed"
    STATE_RESET = "state_reset"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'bill', 'snapshot')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one session)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.operation(result, correlation_id)
        event = AuditEventBuilder.snapshot_saved(version, correlation_id)
    """

    @staticmethod
    def operation(
        result: OperationResult,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        if result.applied:
            return AuditEvent(
                event_type=AuditEventType.OPERATION_APPLIED,
                entity_type="bill",
                correlation_id=correlation_id,
                description=f"Applied {result.operation}",
                details={
                    "operation": result.operation,
                    "people": len(result.state.people),
                    "items": len(result.state.items),
                },
            )
        rejection = result.rejection
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="bill",
            correlation_id=correlation_id,
            description=f"Rejected {result.operation}: {rejection.message}"[:500],
            details={
                "operation": result.operation,
                **rejection.details,
            },
            error_code=rejection.code.value,
            error_message=rejection.message,
        )

    @staticmethod
    def snapshot_loaded(
        version: Optional[int],
        found: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_LOADED,
            entity_type="snapshot",
            correlation_id=correlation_id,
            description=(
                f"Loaded stored snapshot (version {version})"
                if found else "No stored snapshot found"
            ),
            details={
                "found": found,
                "version": version,
            },
        )

    @staticmethod
    def snapshot_migrated(
        source_version: int,
        target_version: int,
        steps: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_MIGRATED,
            entity_type="snapshot",
            correlation_id=correlation_id,
            description=f"Snapshot migrated from version {source_version} to {target_version}",
            details={
                "source_version": source_version,
                "target_version": target_version,
                "steps": steps,
            },
        )

    @staticmethod
    def migration_fallback(
        warnings: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="snapshot",
            correlation_id=correlation_id,
            description="Stored snapshot unusable, started a fresh bill",
            details={
                "warnings": warnings,
            },
        )

    @staticmethod
    def snapshot_saved(
        version: int,
        storage_key: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="snapshot",
            entity_id=storage_key,
            correlation_id=correlation_id,
            description=f"Snapshot saved (version {version})",
            details={
                "version": version,
            },
        )

    @staticmethod
    def save_failed(
        storage_key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="snapshot",
            entity_id=storage_key,
            correlation_id=correlation_id,
            description="Failed to save snapshot",
            error_message=error_message,
        )

    @staticmethod
    def state_reset(
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_RESET,
            entity_type="bill",
            correlation_id=correlation_id,
            description="Bill reset to defaults",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
