"""Fake commerce store — keeps commerce orders in memory for tests and development."""

import time

from fulfillment.commerce.port import CommerceOrderPort


class FakeCommerceStore(CommerceOrderPort):
    """Records every write; can be told to fail or to respond slowly."""

    def __init__(self):
        self.orders: dict[str, dict] = {}
        self.calls: list[tuple] = []
        self.should_succeed = True
        self.failure_reason = "Commerce store unavailable"
        self.latency = 0.0

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Commerce store unavailable",
        latency: float = 0.0,
    ):
        """Configure the fake store behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.latency = latency

    def _respond(self):
        if self.latency:
            time.sleep(self.latency)
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)

    def update_status(self, commerce_order_id: str, status: str) -> None:
        self._respond()
        self.calls.append(("update_status", commerce_order_id, status))
        self.orders.setdefault(commerce_order_id, {})["status"] = status

    def update_tracking(self, commerce_order_id: str, tracking: dict) -> None:
        self._respond()
        self.calls.append(("update_tracking", commerce_order_id, dict(tracking)))
        self.orders.setdefault(commerce_order_id, {}).update(tracking)

    def status_of(self, commerce_order_id: str) -> str | None:
        return self.orders.get(commerce_order_id, {}).get("status")

    def reset(self):
        self.orders.clear()
        self.calls.clear()
        self.configure()
