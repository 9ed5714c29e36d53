"""Errors surfaced by fulfillment operations.

Missing orders and staff use Protean's ``ObjectNotFoundError`` and malformed
input uses Protean's ``ValidationError``; the classes here cover the cases
Protean has no vocabulary for.
"""

from protean.exceptions import ValidationError


class InvalidTransitionError(ValidationError):
    """The requested status is not reachable from the current status."""

    def __init__(self, current_status: str, requested_status: str, valid_transitions: list[str]):
        self.current_status = current_status
        self.requested_status = requested_status
        self.valid_transitions = list(valid_transitions)
        allowed = ", ".join(self.valid_transitions) or "none (terminal state)"
        self.message = (
            f"Invalid status transition from {current_status} to {requested_status}. Valid transitions: {allowed}"
        )
        super().__init__({"status": [self.message]})


class FulfillmentError(Exception):
    """Base class for non-validation fulfillment errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnauthorizedError(FulfillmentError):
    """The acting identity may not mutate fulfillment orders."""


class ConcurrentModificationError(FulfillmentError):
    """The order changed between the caller's read and the conditional write."""

    def __init__(self, order_id: str, expected_status: str | None = None, actual_status: str | None = None):
        self.order_id = order_id
        self.expected_status = expected_status
        self.actual_status = actual_status
        message = f"Order {order_id} was modified concurrently"
        if expected_status is not None:
            message += f"; expected status {expected_status}"
            if actual_status is not None:
                message += f" but found {actual_status}"
        elif actual_status is not None:
            message += f"; it is now {actual_status}"
        super().__init__(message)


class PersistenceFailure(FulfillmentError):
    """The order store is unavailable or rejected the write."""
