"""
Module 10 - API Error Handling

Standardized error handling for the API.

Registry exceptions are mapped to HTTP status codes by category:
validation 400, not_found 404, authorization 403, capacity 422,
verification 422, and 409 for a duplicate leaf.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from api.models.responses import ErrorDetail, ErrorResponse
from core.schemas.errors import ErrorCodes, RegistryException


CATEGORY_STATUS_CODES: dict[str, int] = {
    "validation": 400,
    "not_found": 404,
    "authorization": 403,
    "capacity": 422,
    "verification": 422,
    "internal": 500,
}

CODE_STATUS_OVERRIDES: dict[str, int] = {
    ErrorCodes.DUPLICATE_LEAF: 409,
}


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class InvalidRequestError(APIError):
    """Invalid request parameters."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="INVALID_REQUEST",
            message=message,
            status_code=400,
            details=details,
        )


def status_code_for(exc: RegistryException) -> int:
    return CODE_STATUS_OVERRIDES.get(exc.code, CATEGORY_STATUS_CODES.get(exc.category, 500))


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def registry_error_handler(request: Request, exc: RegistryException) -> JSONResponse:
    """Handle registry exceptions raised by the ledger."""
    model = exc.to_error_model()
    return JSONResponse(
        status_code=status_code_for(exc),
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=model.code,
                category=model.category,
                message=model.message,
                details=model.details,
            ),
        ).model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(),
    )
