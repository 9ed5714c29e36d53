"""Fake audit sink — keeps audit records in memory for test assertions."""

import time
from datetime import datetime

from fulfillment.audit.port import AuditSinkPort


class FakeAuditSink(AuditSinkPort):
    def __init__(self):
        self.records: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Audit sink unavailable"
        self.latency = 0.0

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Audit sink unavailable",
        latency: float = 0.0,
    ):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.latency = latency

    def record(
        self,
        actor_id: str,
        action: str,
        success: bool,
        details: dict,
        origin: str,
        timestamp: datetime,
    ) -> None:
        if self.latency:
            time.sleep(self.latency)
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)

        self.records.append(
            {
                "actor_id": actor_id,
                "action": action,
                "success": success,
                "details": dict(details),
                "origin": origin,
                "timestamp": timestamp,
            }
        )

    def reset(self):
        self.records.clear()
        self.configure()
