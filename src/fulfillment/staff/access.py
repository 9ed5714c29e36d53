"""Who may act on fulfillment orders, and who may be assigned to them."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from fulfillment.errors import UnauthorizedError
from fulfillment.staff.staff import Staff

logger = structlog.get_logger(__name__)


def authorize_actor(actor_id: str | None) -> Staff:
    """Return the acting staff record, or raise if it may not mutate orders.

    Only active administrators pass. An actor id that matches no staff record
    is treated the same as a non-admin.
    """
    if not actor_id:
        raise UnauthorizedError("An acting administrator is required")

    try:
        actor = current_domain.repository_for(Staff).get(str(actor_id))
    except ObjectNotFoundError:
        logger.warning("Rejected unknown actor", actor_id=str(actor_id))
        raise UnauthorizedError(f"Actor {actor_id} is not a known administrator") from None

    if not actor.is_admin or not actor.is_active:
        logger.warning("Rejected non-admin actor", actor_id=str(actor_id), role=actor.role)
        raise UnauthorizedError(f"Actor {actor_id} is not an active administrator")
    return actor


def ensure_staff_exist(staff_ids) -> None:
    """Raise ``ObjectNotFoundError`` for the first id with no staff record."""
    repo = current_domain.repository_for(Staff)
    for staff_id in staff_ids:
        if staff_id:
            repo.get(str(staff_id))
