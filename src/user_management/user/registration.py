"""Customer and guest registration: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from shared.email import normalize_email
from shared.security import MAX_PASSWORD_BYTES, hash_password, password_too_long
from user_management.domain import logger, user_management
from user_management.user.user import User


def check_password_strength(password: str | None, field: str = "password") -> None:
    """Passwords need 8 characters to 72 bytes, including a letter and a digit."""
    problems = []
    if not password or len(password) < 8:
        problems.append("Password must be at least 8 characters long")
    elif password_too_long(password):
        problems.append(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
    if not any(ch.isalpha() for ch in password or ""):
        problems.append("Password must contain a letter")
    if not any(ch.isdigit() for ch in password or ""):
        problems.append("Password must contain a digit")
    if problems:
        raise ValidationError({field: problems})


def find_by_email(email):
    """Return the user registered with `email`, or None."""
    dao = current_domain.repository_for(User)._dao
    matches = dao.query.filter(email_address=normalize_email(email)).all().items
    return matches[0] if matches else None


@user_management.command(part_of="User")
class RegisterUser:
    """Create a customer account, upgrading an existing guest with the same email."""

    email: String(required=True, max_length=254)
    password: String(required=True, max_length=128)
    phone: String(max_length=20)
    first_name: String(max_length=100)
    last_name: String(max_length=100)


@user_management.command(part_of="User")
class RegisterGuest:
    """Create (or reuse) a guest account for checkout without a password."""

    email: String(required=True, max_length=254)


@user_management.command_handler(part_of=User)
class RegistrationHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        check_password_strength(command.password)
        repo = current_domain.repository_for(User)

        existing = find_by_email(command.email)
        if existing is not None and not existing.is_guest:
            raise ValidationError({"email": ["Email is already registered"]})

        password_hash = hash_password(command.password)
        if existing is not None:
            existing.upgrade_from_guest(
                password_hash,
                phone=command.phone,
                first_name=command.first_name,
                last_name=command.last_name,
            )
            user = existing
        else:
            user = User.register(
                email=command.email,
                password_hash=password_hash,
                phone=command.phone,
                first_name=command.first_name,
                last_name=command.last_name,
            )
        repo.add(user)
        logger.info("User registered", user_id=str(user.id), upgraded_guest=existing is not None)
        return str(user.id)

    @handle(RegisterGuest)
    def register_guest(self, command):
        existing = find_by_email(command.email)
        if existing is not None:
            if not existing.is_guest:
                raise ValidationError({"email": ["Email is already registered as a customer"]})
            return str(existing.id)

        user = User.register_guest(command.email)
        current_domain.repository_for(User).add(user)
        logger.info("Guest registered", user_id=str(user.id))
        return str(user.id)
