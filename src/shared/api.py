"""HTTP plumbing shared by all routers: identifier type and error envelopes."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from pydantic import AfterValidator
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.result import CommandResult

logger = structlog.get_logger(__name__)


def _check_uuid(value: str) -> str:
    try:
        UUID(str(value))
    except ValueError as exc:
        raise ValueError(f"'{value}' is not a valid UUID") from exc
    return str(value)


UUIDStr = Annotated[str, AfterValidator(_check_uuid)]


def _envelope(status_code: int, result: CommandResult, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"), headers=headers)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Request rejected", path=request.url.path, errors=exc.messages)
    return _envelope(400, CommandResult.from_exception(exc))


async def invalid_operation_handler(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return _envelope(400, CommandResult.fail(str(exc)))


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    logger.info("Resource not found", path=request.url.path)
    return _envelope(404, CommandResult.from_exception(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return _envelope(422, CommandResult.fail("Invalid request", details))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope(exc.status_code, CommandResult.fail(str(exc.detail)), headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, error=str(exc))
    return _envelope(500, CommandResult.fail("Internal server error", [str(exc)]))


def register_envelope_handlers(app: FastAPI) -> None:
    """Make every error leave the API as a `CommandResult` failure."""
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(InvalidOperationError, invalid_operation_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
