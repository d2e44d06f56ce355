"""Closed-set status values shared by every lifecycle in the platform.

Each lifecycle declares a `StatusEnum` subclass and, when its status changes
are restricted, a transition map of the form::

    _VALID_TRANSITIONS = {
        TicketStatus.OPEN: {TicketStatus.IN_PROGRESS, TicketStatus.CLOSED},
        ...
    }

Members parse from free-form strings with `from_string` and expose
`is_<member>()` predicates, e.g. ``RmaStatus.APPROVED.is_approved()``.
"""

from enum import Enum

from protean.exceptions import ValidationError


class StatusEnum(str, Enum):
    """Base for lower-case string enums with parsing and predicates."""

    def __str__(self) -> str:
        return self.value

    def __getattr__(self, name: str):
        if name.startswith("is_") and name[3:].upper() in type(self).__members__:
            member = type(self)[name[3:].upper()]
            return lambda: self is member
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def field_name(cls) -> str:
        return "status"

    @classmethod
    def from_string(cls, value: str | None, field: str | None = None):
        """Parse a status string, ignoring case and surrounding whitespace."""
        field = field or cls.field_name()
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValidationError({field: [f"Invalid {field} '{value}'. Allowed values: {', '.join(cls.values())}"]})

    def can_transition_to(self, target: "StatusEnum", transitions: dict) -> bool:
        return target in transitions.get(self, set())


def assert_transition(transitions: dict, current: StatusEnum, target: StatusEnum, field: str = "status") -> None:
    """Raise a ValidationError unless `transitions` allows `current` -> `target`."""
    if not current.can_transition_to(target, transitions):
        raise ValidationError({field: [f"Cannot transition from {current.value} to {target.value}"]})
