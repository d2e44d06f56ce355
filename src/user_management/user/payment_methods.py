"""Saved payment method commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, Integer, String
from protean.utils.globals import current_domain

from user_management.domain import user_management
from user_management.user.user import User


@user_management.command(part_of="User")
class AddPaymentMethod:
    user_id: Identifier(required=True)
    method_type: String(required=True, max_length=20)
    provider_ref: String(max_length=255)
    brand: String(max_length=50)
    last4: String(max_length=4)
    exp_month: Integer()
    exp_year: Integer()
    is_default: Boolean(default=False)


@user_management.command(part_of="User")
class RemovePaymentMethod:
    user_id: Identifier(required=True)
    payment_method_id: Identifier(required=True)


@user_management.command(part_of="User")
class SetDefaultPaymentMethod:
    user_id: Identifier(required=True)
    payment_method_id: Identifier(required=True)


@user_management.command_handler(part_of=User)
class PaymentMethodHandler:
    @handle(AddPaymentMethod)
    def add_payment_method(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        method = user.add_payment_method(
            method_type=command.method_type,
            provider_ref=command.provider_ref,
            brand=command.brand,
            last4=command.last4,
            exp_month=command.exp_month,
            exp_year=command.exp_year,
            is_default=command.is_default,
        )
        repo.add(user)
        return str(method.id)

    @handle(RemovePaymentMethod)
    def remove_payment_method(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.remove_payment_method(command.payment_method_id)
        repo.add(user)

    @handle(SetDefaultPaymentMethod)
    def set_default_payment_method(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.set_default_payment_method(command.payment_method_id)
        repo.add(user)
