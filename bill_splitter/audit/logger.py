"""
Audit Logger

DESIGN DECISION: The engine itself never logs. Operations return their
outcome, and the session hands each outcome to this logger.
This provides:
1. A trace of every edit and every rejected edit
2. Visibility into snapshot loading, migration and fallbacks
3. A hook (sink) for callers that want the events themselves

The audit logger:
- Is async so it slots into the session's async flow
- Gracefully handles sink failures (never crashes the caller)
- Supports correlation IDs to trace one session's events
"""

from collections.abc import Callable
from typing import Optional
from uuid import UUID, uuid4

import structlog

from bill_splitter.models.audit import AuditEvent, AuditEventBuilder
from bill_splitter.models.operations import OperationResult


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


AuditSink = Callable[[AuditEvent], None]


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An optional sink callback (for UIs and tests)
    """

    def __init__(
        self,
        sink: Optional[AuditSink] = None,
        correlation_id: Optional[UUID] = None,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Called with every event after it is logged.
                  If None, only logs locally.
            correlation_id: Stamped on events that don't carry their own.
        """
        self._sink = sink
        self._correlation_id = correlation_id
        self._logger = structlog.get_logger("bill_splitter.audit")

    @property
    def correlation_id(self) -> Optional[UUID]:
        return self._correlation_id

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Passes the event to the sink if one is set.

        Returns True if the sink accepted it (or no sink is configured).
        """
        if event.correlation_id is None and self._correlation_id is not None:
            event = event.model_copy(update={"correlation_id": self._correlation_id})

        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink:
            try:
                self._sink(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_operation(self, result: OperationResult) -> None:
        """Log an applied or rejected engine operation."""
        await self.log(AuditEventBuilder.operation(result))

    async def log_snapshot_loaded(self, version: Optional[int], found: bool) -> None:
        await self.log(AuditEventBuilder.snapshot_loaded(version=version, found=found))

    async def log_snapshot_migrated(
        self,
        source_version: int,
        target_version: int,
        steps: list[str],
    ) -> None:
        await self.log(AuditEventBuilder.snapshot_migrated(
            source_version=source_version,
            target_version=target_version,
            steps=steps,
        ))

    async def log_migration_fallback(self, warnings: list[str]) -> None:
        await self.log(AuditEventBuilder.migration_fallback(warnings=warnings))

    async def log_snapshot_saved(self, version: int, storage_key: str) -> None:
        await self.log(AuditEventBuilder.snapshot_saved(version=version, storage_key=storage_key))

    async def log_save_failed(self, storage_key: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.save_failed(
            storage_key=storage_key,
            error_message=error_message,
        ))

    async def log_state_reset(self) -> None:
        await self.log(AuditEventBuilder.state_reset())

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use one per session; every event the session logs carries it.
    """
    return uuid4()
