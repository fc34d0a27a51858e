"""
Error taxonomy for the authentication/session subsystem.

Every error carries a stable `code` tag and the HTTP status the route layer
maps it to (see api/errors.py). Nothing here knows about Flask.
"""
from __future__ import annotations


class AuthError(Exception):
    code = "AUTH_ERROR"
    status = 400
    default_message = "Authentication error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateAccount(AuthError):
    code = "DUPLICATE_ACCOUNT"
    status = 409
    default_message = "Email already registered"


class NotFound(AuthError):
    code = "NOT_FOUND"
    status = 404
    default_message = "Account not found"


class InvalidCredentials(AuthError):
    code = "INVALID_CREDENTIALS"
    status = 401
    default_message = "Invalid credentials"


class InvalidToken(AuthError):
    """Malformed, expired or wrongly signed token."""
    code = "INVALID_TOKEN"
    status = 401
    default_message = "Invalid token"


class Unauthorized(AuthError):
    """Raised by the authorization gate: missing token, invalid token or invalid role."""
    code = "UNAUTHORIZED"
    status = 401
    default_message = "Unauthorized"


class StoreUnavailable(AuthError):
    """Transient storage failure; fatal to the request, not to the process."""
    code = "STORE_UNAVAILABLE"
    status = 503
    default_message = "Storage temporarily unavailable"
