"""
Exception handlers translating domain errors into JSON problem responses.

Body shape: {"detail", "title", "status", "instance"}.
"""
import logging

from fastapi import FastAPI, status
from starlette.requests import Request
from starlette.responses import JSONResponse

from rental.domain.errors import (
    BusinessRuleViolation,
    ConflictError,
    DomainValidationError,
    EntityNotFoundError,
)

logger = logging.getLogger(__name__)


def problem(request: Request, status_code: int, title: str, detail: str, **extra) -> JSONResponse:
    body = {
        "detail": detail,
        "title": title,
        "status": status_code,
        "instance": request.url.path,
    }
    body.update(extra)
    return JSONResponse(body, status_code=status_code)


async def _validation_error(request: Request, exc: DomainValidationError):
    logger.warning("validation_error: path=%s field=%s detail=%s", request.url.path, exc.field, exc.message)
    extra = {"field": exc.field} if exc.field else {}
    return problem(request, status.HTTP_400_BAD_REQUEST, "Validation error", exc.message, **extra)


async def _business_rule_violation(request: Request, exc: BusinessRuleViolation):
    detail = str(exc)
    if "not found" in detail.lower():
        logger.warning("not_found: path=%s detail=%s", request.url.path, detail)
        return problem(request, status.HTTP_404_NOT_FOUND, "Not found", detail)
    logger.warning("business_rule_violation: path=%s detail=%s", request.url.path, detail)
    return problem(request, status.HTTP_400_BAD_REQUEST, "Business rule violation", detail)


async def _not_found(request: Request, exc: EntityNotFoundError):
    logger.warning("not_found: path=%s detail=%s", request.url.path, exc)
    return problem(request, status.HTTP_404_NOT_FOUND, "Not found", str(exc))


async def _conflict(request: Request, exc: ConflictError):
    logger.warning("conflict: path=%s detail=%s", request.url.path, exc)
    return problem(request, status.HTTP_409_CONFLICT, "Conflict", str(exc))


async def _unhandled(request: Request, exc: Exception):
    logger.error("unhandled_error: path=%s", request.url.path, exc_info=exc)
    return problem(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainValidationError, _validation_error)
    app.add_exception_handler(BusinessRuleViolation, _business_rule_violation)
    app.add_exception_handler(EntityNotFoundError, _not_found)
    app.add_exception_handler(ConflictError, _conflict)
    app.add_exception_handler(Exception, _unhandled)
