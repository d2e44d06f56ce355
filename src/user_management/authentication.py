"""Credential checks and token issuing.

Failures for unknown emails and wrong passwords share one message so the
response does not reveal which accounts exist.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from shared.security import REFRESH_TOKEN, create_token_pair, decode_token, verify_password
from user_management.domain import logger
from user_management.user.registration import find_by_email
from user_management.user.user import User, UserStatus

_INVALID_CREDENTIALS = "Invalid email or password"


def _assert_can_sign_in(user):
    if user.status == UserStatus.BLOCKED.value:
        raise ValidationError({"account": ["Account is blocked"]})
    if user.status == UserStatus.INACTIVE.value:
        raise ValidationError({"account": ["Account is inactive"]})


def authenticate(email: str, password: str) -> dict:
    """Verify the credentials and return `{user_id, role, access_token, refresh_token, token_type}`."""
    user = find_by_email(email)
    if user is None:
        raise ValidationError({"credentials": [_INVALID_CREDENTIALS]})
    if user.is_guest:
        raise ValidationError({"credentials": ["Guest users cannot sign in with a password"]})
    if not verify_password(password or "", user.password_hash):
        logger.warning("Failed sign-in", user_id=str(user.id))
        raise ValidationError({"credentials": [_INVALID_CREDENTIALS]})
    _assert_can_sign_in(user)

    user.record_login()
    current_domain.repository_for(User).add(user)
    logger.info("User signed in", user_id=str(user.id))
    return {"user_id": str(user.id), "role": user.role, **create_token_pair(str(user.id), user.role)}


def issue_guest_tokens(user_id: str) -> dict:
    user = current_domain.repository_for(User).get(user_id)
    return {"user_id": str(user.id), "role": user.role, **create_token_pair(str(user.id), user.role)}


def refresh_tokens(refresh_token: str) -> dict:
    """Exchange a refresh token for a new token pair, re-reading the user's current role."""
    payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN)
    try:
        user = current_domain.repository_for(User).get(payload["sub"])
    except ObjectNotFoundError as exc:
        raise ValidationError({"token": ["Token subject no longer exists"]}) from exc
    _assert_can_sign_in(user)
    return {"user_id": str(user.id), "role": user.role, **create_token_pair(str(user.id), user.role)}
