"""Structural email address checks shared by every context that stores one."""

from protean.exceptions import ValidationError

_FORBIDDEN = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


def _invalid(email, field):
    return ValidationError({field: [f"Invalid email address: {email!r}"]})


def normalize_email(email: str | None, field: str = "email") -> str:
    """Return the trimmed, lower-cased address or raise a ValidationError.

    Requires exactly one @, non-empty local and domain parts without leading
    or trailing dots, a dotted domain whose labels do not start or end with a
    hyphen, no consecutive dots, no whitespace and none of the characters that
    need quoting.
    """
    if not email or not email.strip():
        raise ValidationError({field: ["Email is required"]})
    email = email.strip().lower()

    if any(ch.isspace() for ch in email) or email.count("@") != 1:
        raise _invalid(email, field)

    local_part, domain_part = email.split("@", 1)
    for part in (local_part, domain_part):
        if not part or part.startswith(".") or part.endswith(".") or ".." in part:
            raise _invalid(email, field)

    if "." not in domain_part:
        raise _invalid(email, field)
    for label in domain_part.split("."):
        if label.startswith("-") or label.endswith("-"):
            raise _invalid(email, field)

    if any(ch in email for ch in _FORBIDDEN):
        raise _invalid(email, field)
    return email
