"""Uniform response envelope returned by every command and query endpoint."""

from typing import Any

from protean.exceptions import ObjectNotFoundError, ValidationError
from pydantic import BaseModel


def flatten_messages(messages: Any) -> list[str]:
    """Turn a protean error payload (dict of lists, list or str) into flat strings."""
    if messages is None:
        return []
    if isinstance(messages, str):
        return [messages]
    if isinstance(messages, dict):
        flat = []
        for field, errors in messages.items():
            for error in errors if isinstance(errors, list | tuple) else [errors]:
                flat.append(f"{field}: {error}")
        return flat
    if isinstance(messages, list | tuple):
        return [str(m) for m in messages]
    return [str(messages)]


class CommandResult(BaseModel):
    """`{ success, data, error, errors }` envelope.

    `error` carries a single human readable message, `errors` the individual
    validation details when there are any.
    """

    success: bool
    data: Any = None
    error: str | None = None
    errors: list[str] | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "CommandResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, errors: list[str] | None = None) -> "CommandResult":
        return cls(success=False, error=error, errors=errors or [error])

    @classmethod
    def from_exception(cls, exc: Exception) -> "CommandResult":
        if isinstance(exc, ValidationError):
            details = flatten_messages(exc.messages)
            return cls.fail(details[0] if details else "Validation failed", details)
        if isinstance(exc, ObjectNotFoundError):
            return cls.fail("Resource not found", [str(exc)])
        return cls.fail(str(exc) or exc.__class__.__name__)
