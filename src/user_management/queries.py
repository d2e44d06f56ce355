"""Read-side queries for the user management context."""

from protean.utils.globals import current_domain

from shared.clock import as_aware
from shared.paging import paginate
from user_management.user.user import AddressType, User, UserRole, UserStatus, address_dict


def get_user(user_id: str) -> dict:
    return current_domain.repository_for(User).get(user_id).details()


def list_users(
    status: str | None = None,
    role: str | None = None,
    include_guests: bool = False,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    dao = current_domain.repository_for(User)._dao
    filters = {}
    if status:
        filters["status"] = UserStatus.from_string(status).value
    if role:
        filters["role"] = UserRole.from_string(role).value
    users = dao.query.filter(**filters).all().items if filters else dao.query.all().items
    if not include_guests:
        users = [u for u in users if not u.is_guest]

    result = paginate(sorted(users, key=lambda u: as_aware(u.created_at), reverse=True), page, page_size)
    result["items"] = [
        {
            "user_id": str(u.id),
            "email": u.email.address,
            "status": u.status,
            "role": u.role,
            "email_verified": u.email_verified,
            "created_at": u.created_at,
        }
        for u in result["items"]
    ]
    return result


def list_addresses(user_id: str, address_type: str | None = None) -> list[dict]:
    user = current_domain.repository_for(User).get(user_id)
    addresses = user.addresses
    if address_type:
        wanted = AddressType.from_string(address_type).value
        addresses = [a for a in addresses if a.address_type == wanted]
    # Defaults first
    return [address_dict(a) for a in sorted(addresses, key=lambda a: (a.address_type, not a.is_default))]
