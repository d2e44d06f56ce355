"""Domain events for the User aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from user_management.domain import user_management


@user_management.event(part_of="User")
class UserRegistered:
    """A customer or guest account was created."""

    __version__ = 1

    user_id: Identifier(required=True)
    email: String(required=True)
    role: String(required=True)
    is_guest: Boolean(default=False)
    registered_at: DateTime(required=True)


@user_management.event(part_of="User")
class UserStatusChanged:
    """An account was blocked, deactivated or re-activated."""

    __version__ = 1

    user_id: Identifier(required=True)
    from_status: String(required=True)
    to_status: String(required=True)
    reason: String()
    changed_at: DateTime(required=True)


@user_management.event(part_of="User")
class UserRoleChanged:
    __version__ = 1

    user_id: Identifier(required=True)
    from_role: String(required=True)
    to_role: String(required=True)


@user_management.event(part_of="User")
class PasswordChanged:
    __version__ = 1

    user_id: Identifier(required=True)
    changed_at: DateTime(required=True)
