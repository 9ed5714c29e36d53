"""Fake notifier — records notifications in memory for test assertions."""

import time
from uuid import uuid4

from fulfillment.notifier.port import NotifierPort


class FakeNotifier(NotifierPort):
    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification service unavailable"
        self.latency = 0.0

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Notification service unavailable",
        latency: float = 0.0,
    ):
        """Configure the fake notifier behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.latency = latency

    def notify(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        link: str,
        metadata: dict | None = None,
    ) -> dict:
        if self.latency:
            time.sleep(self.latency)
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)

        notification_id = f"ntf-{uuid4().hex[:12]}"
        self.sent.append(
            {
                "notification_id": notification_id,
                "user_id": user_id,
                "type": notification_type,
                "title": title,
                "message": message,
                "link": link,
                "metadata": dict(metadata or {}),
            }
        )
        return {"notification_id": notification_id, "status": "sent"}

    def reset(self):
        """Clear sent notifications (useful between tests)."""
        self.sent.clear()
        self.configure()
