"""
Error taxonomy for the API.

Every class is an `HTTPException`, so routes raise them exactly like FastAPI's
own exception; the handlers in `realtor.main` render them into the
`{"success": false, "error": ..., "details": ...}` envelope.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException


class ApiError(HTTPException):
    status_code_default = 500
    message = "An internal server error occurred."

    def __init__(self, detail: str | None = None, *, details: Any = None) -> None:
        super().__init__(status_code=self.status_code_default, detail=detail or self.message)
        self.details = details


class ValidationFailed(ApiError):
    status_code_default = 400
    message = "Invalid input data."


class BadRequest(ApiError):
    status_code_default = 400
    message = "Bad request."


class Unauthenticated(ApiError):
    status_code_default = 401
    message = "Authentication required."


class InvalidCredentials(Unauthenticated):
    # Same message for unknown email and wrong password.
    message = "Invalid email or password."


class Forbidden(ApiError):
    status_code_default = 403
    message = "Forbidden: Admin access required"


class NotFound(ApiError):
    status_code_default = 404
    message = "Not found"


class Conflict(ApiError):
    status_code_default = 409
    message = "Resource already exists."


class Gone(ApiError):
    status_code_default = 410
    message = "This endpoint is no longer available."


class ServerError(ApiError):
    status_code_default = 500


class ServerMisconfigured(ServerError):
    message = "Server configuration error."


# Substrings of low-level error messages that point at deployment configuration
# rather than a bug, with the message shown to the caller instead.
_CONFIG_ERROR_HINTS: tuple[tuple[str, str], ...] = (
    ("DATABASE_URL", "Database configuration error. Please check server environment variables."),
    ("unable to open database file", "Database configuration error. Please check server environment variables."),
    ("could not connect to server", "Database configuration error. Please check server environment variables."),
    ("JWT_SECRET", "Server configuration error: Problem with JWT secret or algorithm."),
)


def public_message_for(exc: BaseException) -> str:
    """
    Message for an unexpected exception: generic, unless it is a known
    configuration failure.
    """
    text = str(exc) or ""
    for needle, message in _CONFIG_ERROR_HINTS:
        if needle.lower() in text.lower():
            return message
    return ServerError.message
