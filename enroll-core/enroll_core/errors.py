"""
User-Facing Error Responses
===========================
Standardized JSON error bodies. Technical details go to the log, never to
the client.
"""

from typing import Any, Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)

# Fixed message for expired and unknown codes; must not reveal which one it was
OTP_UNAVAILABLE_MESSAGE = "OTP expired or not found. Please request a new one."

DEFAULT_VALIDATION_MESSAGE = "Invalid request data"

# Validation messages by route prefix
VALIDATION_MESSAGES = {
    "/api/candidates": "Invalid candidate data",
}


def error_response(
    status_code: int,
    error: str,
    log_message: Optional[str] = None,
    **extra: Any,
) -> JSONResponse:
    """
    Create a JSON error response.

    Args:
        status_code: HTTP status code
        error: Message shown to the user
        log_message: Technical message for logs
        **extra: Additional fields merged into the body

    Returns:
        JSONResponse with ``{"error": ..., **extra}``
    """
    if log_message:
        logger.warning(log_message, status_code=status_code)

    return JSONResponse(status_code=status_code, content={"error": error, **extra})


class UserErrors:
    """Standard user error factory methods."""

    @staticmethod
    def invalid_phone() -> JSONResponse:
        return error_response(400, "Invalid phone number", success=False)

    @staticmethod
    def invalid_code() -> JSONResponse:
        return error_response(400, "Invalid OTP format", success=False)

    @staticmethod
    def otp_unavailable() -> JSONResponse:
        return error_response(400, OTP_UNAVAILABLE_MESSAGE, success=False)

    @staticmethod
    def otp_mismatch(attempts_remaining: int) -> JSONResponse:
        return error_response(
            400,
            "Invalid OTP",
            success=False,
            attemptsRemaining=attempts_remaining,
        )

    @staticmethod
    def rate_limited(retry_after: Optional[int] = None) -> JSONResponse:
        response = error_response(
            429,
            "Too many OTP requests. Please try again later.",
            success=False,
            retryAfter=retry_after,
        )
        if retry_after:
            response.headers["Retry-After"] = str(retry_after)
        return response

    @staticmethod
    def delivery_failed(log_detail: Optional[str] = None) -> JSONResponse:
        return error_response(503, "Unable to deliver OTP", log_detail, success=False)

    @staticmethod
    def internal(error: str, log_detail: Optional[str] = None) -> JSONResponse:
        return error_response(500, error, log_detail)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body/path validation failures as 400 with field details."""
    details = [
        {
            "loc": list(err.get("loc", ())),
            "msg": err.get("msg"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    path = request.url.path
    logger.info("Request validation failed", path=path, errors=len(details))
    message = next(
        (msg for prefix, msg in VALIDATION_MESSAGES.items() if path.startswith(prefix)),
        DEFAULT_VALIDATION_MESSAGE,
    )
    return error_response(400, message, details=details)


def register_error_handlers(app: FastAPI) -> None:
    """Install the service's exception handlers on an app."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
