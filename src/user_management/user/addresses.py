"""Address book commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from user_management.domain import user_management
from user_management.user.user import User


@user_management.command(part_of="User")
class AddAddress:
    """Add a billing or shipping address. The first of each type becomes the default."""

    user_id: Identifier(required=True)
    address_type: String(max_length=20, default="shipping")
    first_name: String(max_length=100)
    last_name: String(max_length=100)
    line1: String(required=True, max_length=255)
    line2: String(max_length=255)
    city: String(required=True, max_length=100)
    region: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(required=True, max_length=2)
    phone: String(max_length=20)
    is_default: Boolean(default=False)


@user_management.command(part_of="User")
class UpdateAddress:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    first_name: String(max_length=100)
    last_name: String(max_length=100)
    line1: String(max_length=255)
    line2: String(max_length=255)
    city: String(max_length=100)
    region: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=2)
    phone: String(max_length=20)


@user_management.command(part_of="User")
class RemoveAddress:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


@user_management.command(part_of="User")
class SetDefaultAddress:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


_DETAIL_FIELDS = ("first_name", "last_name", "line2", "region", "postal_code", "phone")


@user_management.command_handler(part_of=User)
class AddressHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        address = user.add_address(
            line1=command.line1,
            city=command.city,
            country=command.country,
            address_type=command.address_type,
            is_default=command.is_default,
            **{field: getattr(command, field) for field in _DETAIL_FIELDS},
        )
        repo.add(user)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.update_address(
            command.address_id,
            line1=command.line1,
            city=command.city,
            country=command.country,
            **{field: getattr(command, field) for field in _DETAIL_FIELDS},
        )
        repo.add(user)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.remove_address(command.address_id)
        repo.add(user)

    @handle(SetDefaultAddress)
    def set_default_address(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.set_default_address(command.address_id)
        repo.add(user)
