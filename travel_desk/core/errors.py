from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class AppError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(code="not_found", message=message, status_code=404)


class BadRequestError(AppError):
    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(code="bad_request", message=message, status_code=400)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Session expired. Please sign in again.") -> None:
        super().__init__(code="unauthorized", message=message, status_code=401)


class ForbiddenError(AppError):
    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(code="forbidden", message=message, status_code=403)


class UpstreamError(AppError):
    def __init__(self, message: str = "Something went wrong", upstream_status: Optional[int] = None) -> None:
        details = {"upstreamStatus": upstream_status} if upstream_status is not None else None
        super().__init__(code="upstream_error", message=message, status_code=502, details=details)
        self.upstream_status = upstream_status


class PayloadError(AppError):
    """Raised when a booking form lacks the fields the booking API insists on."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            code="payload_incomplete",
            message=message,
            status_code=400,
            details={"field": field},
        )
        self.field = field


class FormValidationError(AppError):
    def __init__(self, draft_index: int, errors: Dict[str, str]) -> None:
        super().__init__(
            code="form_validation_error",
            message=f"Please complete all required fields for Booking {draft_index + 1}",
            status_code=422,
            details={"draftIndex": draft_index, "errors": errors},
        )
        self.draft_index = draft_index
        self.errors = errors


class ErrorEnvelope(BaseModel):
    error: ErrorDetail


def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    envelope = ErrorEnvelope(error=ErrorDetail(code=exc.code, message=exc.message, details=exc.details))
    return JSONResponse(status_code=exc.status_code, content=envelope.model_dump())


def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    envelope = ErrorEnvelope(
        error=ErrorDetail(
            code="validation_error",
            message="Validation error",
            details={"errors": exc.errors()},
        )
    )
    return JSONResponse(status_code=422, content=envelope.model_dump(mode="json"))
