"""Audit sink that writes each record as a structured log line."""

from datetime import datetime

import structlog

from fulfillment.audit.port import AuditSinkPort

logger = structlog.get_logger("fulfillment.audit")


class LogAuditSink(AuditSinkPort):
    def record(
        self,
        actor_id: str,
        action: str,
        success: bool,
        details: dict,
        origin: str,
        timestamp: datetime,
    ) -> None:
        logger.info(
            "Audit record",
            actor_id=actor_id,
            action=action,
            success=success,
            origin=origin,
            timestamp=timestamp.isoformat(),
            **details,
        )
