"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError
from decimal import Decimal
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

class EarningsAPIException(HTTPException):
    """Base exception class for the earnings application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

class BadRequestException(EarningsAPIException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )

class ValidationException(BadRequestException):
    """400 for missing or malformed input"""

    def __init__(self, detail: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(detail=detail, error_code=error_code)

class UnauthorizedException(EarningsAPIException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Unauthorized", error_code: str = "UNAUTHORIZED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"}
        )

class ForbiddenException(EarningsAPIException):
    """403 Forbidden"""

    def __init__(self, detail: str = "Forbidden", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code
        )

class NotFoundException(EarningsAPIException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )

class ConflictException(EarningsAPIException):
    """409 Conflict"""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )

class StoreException(EarningsAPIException):
    """500 for a failed store query; the driver message is passed through"""

    def __init__(self, detail: str, error_code: str = "STORE_ERROR"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code
        )

# Business logic exceptions
class PendingWithdrawalExistsException(ConflictException):
    """User already has a withdrawal awaiting review"""

    def __init__(self):
        super().__init__(
            detail="You already have a pending withdrawal request. Please wait for it to be processed.",
            error_code="PENDING_WITHDRAWAL_EXISTS"
        )

class InsufficientBalanceException(BadRequestException):
    """Requested amount exceeds the available balance"""

    def __init__(self, available: Decimal, currency_symbol: str = "₹"):
        super().__init__(
            detail=f"Insufficient balance. Available: {currency_symbol}{available:.2f}",
            error_code="INSUFFICIENT_BALANCE"
        )
        self.available = available

class InvalidStatusTransitionException(ConflictException):
    """Status change not allowed from the current state"""

    def __init__(self, entity: str, current: str, requested: str):
        super().__init__(
            detail=f"Cannot change {entity} status from '{current}' to '{requested}'",
            error_code="INVALID_STATUS_TRANSITION"
        )

def _error_body(message: str, code: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": message}
    if code:
        body["code"] = code
    return body

def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(location)
        messages.append(f"{field}: {error.get('msg')}" if field else error.get("msg", "Invalid input"))
    return "; ".join(messages) or "Invalid request"

def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to the {success: false, error} envelope"""

    @app.exception_handler(EarningsAPIException)
    async def earnings_exception_handler(request: Request, exc: EarningsAPIException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail, exc.error_code),
            headers=exc.headers
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "success": False,
                    "error": "Endpoint not found",
                    "path": request.url.path
                }
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(_validation_message(exc), "VALIDATION_ERROR")
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Store failure on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(str(exc.orig) if getattr(exc, "orig", None) else str(exc), "STORE_ERROR")
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(str(exc) or "Internal Server Error", "INTERNAL_ERROR")
        )
