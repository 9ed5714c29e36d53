"""Repository for the FulfillmentOrder aggregate.

Adds the two persistence rules the base repository does not know about:
profit is always recomputed before a write, and status changes are written
conditionally so two administrators working from the same stale read cannot
both succeed.
"""

import structlog
from protean.core.repository import BaseRepository
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from sqlalchemy.exc import SQLAlchemyError

from fulfillment.domain import fulfillment
from fulfillment.errors import ConcurrentModificationError, PersistenceFailure
from fulfillment.order.order import FulfillmentOrder

logger = structlog.get_logger(__name__)


@fulfillment.repository(part_of=FulfillmentOrder)
class FulfillmentOrderRepository(BaseRepository):
    def add(self, order: FulfillmentOrder) -> FulfillmentOrder:
        return self._write(order, expected_status=None)

    def save_transition(
        self,
        order: FulfillmentOrder,
        expected_status: str,
        expected_version: int,
    ) -> FulfillmentOrder:
        """Persist ``order`` only if the stored copy is still the one it was read from.

        The stored row must still hold ``expected_status`` at
        ``expected_version``; otherwise another writer got there first and
        ``ConcurrentModificationError`` is raised without writing anything.
        Two writers that both pass this check are separated by the
        aggregate version check on write, which fails the later one.
        """
        if not self._is_unchanged(str(order.id), expected_status, expected_version):
            current = self.find_current_status(str(order.id))
            logger.warning(
                "Rejected stale status write",
                order_id=str(order.id),
                expected_status=expected_status,
                expected_version=expected_version,
                actual_status=current,
            )
            raise ConcurrentModificationError(str(order.id), expected_status, current)

        return self._write(order, expected_status=expected_status)

    def _is_unchanged(self, order_id: str, status: str, status_version: int) -> bool:
        return bool(
            self._dao.query.filter(id=order_id, status=status, status_version=status_version).all().total
        )

    def _write(self, order: FulfillmentOrder, expected_status: str | None) -> FulfillmentOrder:
        order.recalculate_profit()
        try:
            return super().add(order)
        except ExpectedVersionError as exc:
            current = self.find_current_status(str(order.id))
            logger.warning(
                "Rejected write of outdated order version",
                order_id=str(order.id),
                expected_status=expected_status,
                actual_status=current,
            )
            raise ConcurrentModificationError(str(order.id), expected_status, current) from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to persist fulfillment order", order_id=str(order.id), error=str(exc))
            raise PersistenceFailure(f"Could not persist fulfillment order {order.id}") from exc

    def find_current_status(self, order_id: str) -> str | None:
        try:
            return self._dao.get(order_id).status
        except ObjectNotFoundError:
            return None

    def find_by_commerce_order(self, commerce_order_id: str) -> FulfillmentOrder | None:
        return self._dao.query.filter(commerce_order_id=str(commerce_order_id)).all().first
