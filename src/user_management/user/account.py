"""Profile, credential, status and role commands."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from shared.security import hash_password, verify_password
from user_management.domain import logger, user_management
from user_management.user.registration import check_password_strength, find_by_email
from user_management.user.user import User


@user_management.command(part_of="User")
class UpdateProfile:
    user_id: Identifier(required=True)
    first_name: String(max_length=100)
    last_name: String(max_length=100)
    phone: String(max_length=20)
    locale: String(max_length=5)
    currency: String(max_length=3)
    style_preferences: Text()  # JSON object


@user_management.command(part_of="User")
class ChangePassword:
    """Replace the password after verifying the current one."""

    user_id: Identifier(required=True)
    current_password: String(required=True, max_length=128)
    new_password: String(required=True, max_length=128)


@user_management.command(part_of="User")
class ResetPassword:
    """Set a new password for the account registered with `email`."""

    email: String(required=True, max_length=254)
    new_password: String(required=True, max_length=128)


@user_management.command(part_of="User")
class VerifyEmail:
    user_id: Identifier(required=True)


@user_management.command(part_of="User")
class VerifyPhone:
    user_id: Identifier(required=True)


@user_management.command(part_of="User")
class BlockUser:
    user_id: Identifier(required=True)
    reason: String(max_length=500)


@user_management.command(part_of="User")
class ActivateUser:
    user_id: Identifier(required=True)


@user_management.command(part_of="User")
class DeactivateUser:
    user_id: Identifier(required=True)


@user_management.command(part_of="User")
class ChangeUserRole:
    user_id: Identifier(required=True)
    role: String(required=True, max_length=20)


@user_management.command_handler(part_of=User)
class AccountHandler:
    def _apply(self, user_id, change):
        repo = current_domain.repository_for(User)
        user = repo.get(user_id)
        change(user)
        repo.add(user)
        return user

    @handle(UpdateProfile)
    def update_profile(self, command):
        changes = {
            field: getattr(command, field)
            for field in ("first_name", "last_name", "phone", "locale", "currency")
            if getattr(command, field) is not None
        }
        if command.style_preferences is not None:
            try:
                changes["style_preferences"] = json.loads(command.style_preferences)
            except ValueError as exc:
                raise ValidationError({"style_preferences": ["Style preferences must be valid JSON"]}) from exc
        self._apply(command.user_id, lambda u: u.update_profile(**changes))

    @handle(ChangePassword)
    def change_password(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        if not verify_password(command.current_password, user.password_hash):
            raise ValidationError({"current_password": ["Current password is incorrect"]})
        check_password_strength(command.new_password, field="new_password")
        user.change_password(hash_password(command.new_password))
        repo.add(user)
        logger.info("Password changed", user_id=str(user.id))

    @handle(ResetPassword)
    def reset_password(self, command):
        user = find_by_email(command.email)
        if user is None:
            raise ObjectNotFoundError(f"No account for {command.email}")
        check_password_strength(command.new_password, field="new_password")
        user.change_password(hash_password(command.new_password))
        current_domain.repository_for(User).add(user)
        logger.info("Password reset", user_id=str(user.id))

    @handle(VerifyEmail)
    def verify_email(self, command):
        self._apply(command.user_id, lambda u: u.verify_email())

    @handle(VerifyPhone)
    def verify_phone(self, command):
        self._apply(command.user_id, lambda u: u.verify_phone())

    @handle(BlockUser)
    def block(self, command):
        user = self._apply(command.user_id, lambda u: u.block(command.reason))
        logger.warning("User blocked", user_id=str(user.id), reason=command.reason)
        return user.status

    @handle(ActivateUser)
    def activate(self, command):
        return self._apply(command.user_id, lambda u: u.activate()).status

    @handle(DeactivateUser)
    def deactivate(self, command):
        return self._apply(command.user_id, lambda u: u.deactivate()).status

    @handle(ChangeUserRole)
    def change_role(self, command):
        return self._apply(command.user_id, lambda u: u.change_role(command.role)).role
