"""Staff aggregate — the people who operate the fulfillment board.

Administrators mutate orders; pickers, packers, QC staff and courier persons
are assigned to them. Deactivated staff keep their record so historical
assignments still resolve.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String

from fulfillment.domain import fulfillment


class StaffRoleType(Enum):
    ADMIN = "admin"
    PICKER = "picker"
    PACKER = "packer"
    QC = "qc"
    COURIER = "courier"


@fulfillment.event(part_of="Staff")
class StaffRegistered:
    __version__ = 1

    staff_id = Identifier(required=True)
    name = String(required=True)
    email = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)


@fulfillment.event(part_of="Staff")
class StaffDeactivated:
    __version__ = 1

    staff_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)


@fulfillment.aggregate
class Staff:
    name = String(required=True, max_length=200)
    email = String(required=True, max_length=255)
    role = String(required=True, choices=StaffRoleType)
    is_active = Boolean(default=True)
    registered_at = DateTime()

    @classmethod
    def register(cls, name: str, email: str, role: str):
        now = datetime.now(UTC)
        staff = cls(name=name, email=email.strip().lower(), role=role, is_active=True, registered_at=now)
        staff.raise_(
            StaffRegistered(
                staff_id=str(staff.id),
                name=staff.name,
                email=staff.email,
                role=staff.role,
                registered_at=now,
            )
        )
        return staff

    @property
    def is_admin(self) -> bool:
        return self.role == StaffRoleType.ADMIN.value

    def deactivate(self) -> None:
        if not self.is_active:
            raise ValidationError({"staff": ["Staff member is already inactive"]})
        self.is_active = False
        self.raise_(StaffDeactivated(staff_id=str(self.id), deactivated_at=datetime.now(UTC)))
