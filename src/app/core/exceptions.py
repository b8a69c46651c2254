"""Custom exception classes for the account API.

This module defines the closed set of errors raised by the services and
the data-access layer. Each exception maps to a code in errors.py, and the
handlers in ``app.api.middleware.error_handler`` turn them into responses.
"""

from typing import Any

from app.core.errors import get_http_status


class AppError(Exception):
    """Base exception for all application errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "USR_001")
        details: Field-level context returned to the client (validation and
            conflict errors) or logged (everything else)
        http_status: HTTP status code to return (defaults to the catalog's)
    """

    def __init__(
        self,
        error_code: str,
        details: Any = None,
        http_status: int | None = None,
    ):
        self.error_code = error_code
        self.details = details
        self.http_status = http_status or get_http_status(error_code)
        super().__init__(error_code)


class ValidationError(AppError):
    """Raised when input is missing or malformed.

    ``details`` is a list of ``{field, message, type, value}`` dicts.
    """

    def __init__(self, details: list[dict] | None = None, error_code: str = "VAL_001"):
        super().__init__(error_code, details or [])

    @classmethod
    def for_field(cls, field: str, message: str, value: Any = None, type_: str = "value_error"):
        return cls([{"field": field, "message": message, "type": type_, "value": value}])


class ConflictError(AppError):
    """Raised when a unique value (email, CPF) already belongs to another user."""

    def __init__(self, field: str, error_code: str | None = None):
        if error_code is None:
            error_code = {"email": "USR_001", "cpf": "USR_002"}.get(field, "DB_002")
        self.field = field
        super().__init__(
            error_code,
            [{"field": field, "message": "value already exists"}],
        )


class AuthError(AppError):
    """Raised for missing or invalid credentials and bad passwords."""

    pass


class SessionExpiredError(AuthError):
    """Raised when a session token is past its expiry."""

    def __init__(self):
        super().__init__("AUTH_004")


class ForbiddenError(AppError):
    """Raised when an authenticated principal may not perform the action."""

    pass


class NotFoundError(AppError):
    """Raised when no record matches the lookup."""

    pass


class InternalError(AppError):
    """Raised for storage or transport failures the client cannot fix.

    Common causes:
    - Database write failed inside a transaction (DB_001)
    - SMTP server rejected or dropped the message (MAIL_001)
    """

    pass
