"""Staff management — commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.staff.staff import Staff


@fulfillment.command(part_of="Staff")
class RegisterStaff:
    name = String(required=True, max_length=200)
    email = String(required=True, max_length=255)
    role = String(required=True, max_length=20)


@fulfillment.command(part_of="Staff")
class DeactivateStaff:
    staff_id = Identifier(required=True)


@fulfillment.command_handler(part_of=Staff)
class StaffManagementHandler:
    @handle(RegisterStaff)
    def register_staff(self, command):
        repo = current_domain.repository_for(Staff)
        email = command.email.strip().lower()
        if repo._dao.query.filter(email=email).all().total:
            raise ValidationError({"email": [f"Staff with email {email} already exists"]})

        staff = Staff.register(name=command.name, email=email, role=command.role)
        repo.add(staff)
        return str(staff.id)

    @handle(DeactivateStaff)
    def deactivate_staff(self, command):
        repo = current_domain.repository_for(Staff)
        staff = repo.get(command.staff_id)
        staff.deactivate()
        repo.add(staff)
