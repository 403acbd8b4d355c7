from typing import Any, Dict, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import BaseModel, Field

from plump_rest.errors import InvariantViolation, NotFound, code_for_status


class ErrorBody(BaseModel):
    code: str = Field(..., description="Stable machine-readable code")
    message: str = Field(..., description="Human-readable explanation")
    status: int = Field(..., description="HTTP status code duplicated here for convenience")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Optional diagnostic details")


def _error(status: int, message: str, details: Optional[Dict[str, Any]] = None, code: Optional[str] = None) -> JSONResponse:
    body = ErrorBody(code=code or code_for_status(status), message=message, status=status, details=details)
    return JSONResponse({"error": body.model_dump()}, status_code=status)


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Error"
    details = exc.detail if isinstance(exc.detail, dict) else None
    return _error(exc.status_code, message, details)


def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Normalize FastAPI/Pydantic 422 into 400 with consistent shape
    return _error(400, "Invalid request", {"errors": jsonable_encoder(exc.errors())}, code="bad_request")


def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return _error(404, str(exc))


def invariant_violation_handler(request: Request, exc: InvariantViolation) -> JSONResponse:
    return _error(409, str(exc))
