"""Error codes and client-facing messages.

This module defines the error catalog for the account API.
Each error has:
- code: Unique identifier
- error: Short title shown in the ``error`` field of the response
- message: Client-facing explanation
- http_status: Default HTTP status code for the error
"""

ERROR_CATALOG: dict[str, dict] = {
    "VAL_001": {
        "code": "VAL_001",
        "error": "Validation error",
        "message": "One or more fields are missing or invalid.",
        "http_status": 400,
    },
    # Authentication
    "AUTH_001": {
        "code": "AUTH_001",
        "error": "Invalid credentials",
        "message": "Invalid email or password.",
        "http_status": 401,
    },
    "AUTH_002": {
        "code": "AUTH_002",
        "error": "Unauthorized",
        "message": "Access denied. Log in to continue.",
        "http_status": 401,
    },
    "AUTH_003": {
        "code": "AUTH_003",
        "error": "Invalid token",
        "message": "Invalid token, authenticate again.",
        "http_status": 401,
    },
    "AUTH_004": {
        "code": "AUTH_004",
        "error": "Token expired",
        "message": "Session expired, log in again.",
        "http_status": 401,
    },
    "AUTH_005": {
        "code": "AUTH_005",
        "error": "Unauthorized access",
        "message": "This account is deactivated.",
        "http_status": 403,
    },
    "AUTH_006": {
        "code": "AUTH_006",
        "error": "Invalid reset token",
        "message": "This password reset link is invalid or has expired.",
        "http_status": 400,
    },
    # Users
    "USR_001": {
        "code": "USR_001",
        "error": "Data conflict",
        "message": "Email already registered.",
        "http_status": 409,
    },
    "USR_002": {
        "code": "USR_002",
        "error": "Data conflict",
        "message": "CPF already registered.",
        "http_status": 409,
    },
    "USR_003": {
        "code": "USR_003",
        "error": "Resource not found",
        "message": "User not found.",
        "http_status": 404,
    },
    "USR_004": {
        "code": "USR_004",
        "error": "Resource not found",
        "message": "Email not found in our system.",
        "http_status": 404,
    },
    # Infrastructure
    "DB_001": {
        "code": "DB_001",
        "error": "Database error",
        "message": "A problem occurred while accessing the data.",
        "http_status": 500,
    },
    "DB_002": {
        "code": "DB_002",
        "error": "Data conflict",
        "message": "A record with this value already exists.",
        "http_status": 409,
    },
    "MAIL_001": {
        "code": "MAIL_001",
        "error": "Mail delivery failed",
        "message": "The email could not be sent. Please try again later.",
        "http_status": 500,
    },
    "SYS_001": {
        "code": "SYS_001",
        "error": "Internal server error",
        "message": "An unexpected error occurred.",
        "http_status": 500,
    },
    # HTTP surface
    "API_001": {
        "code": "API_001",
        "error": "Endpoint not found",
        "message": "The requested endpoint does not exist.",
        "http_status": 404,
    },
    "API_002": {
        "code": "API_002",
        "error": "Unauthorized access",
        "message": "You do not have permission to access this resource.",
        "http_status": 403,
    },
    "API_003": {
        "code": "API_003",
        "error": "Request error",
        "message": "The request could not be processed.",
        "http_status": 400,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Args:
        error_code: Error code from the catalog

    Returns:
        Dict with error details. Unknown codes resolve to a generic
        internal error instead of raising.
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "error": "Internal server error",
            "message": f"Unknown error code: {error_code}",
            "http_status": 500,
        }
    return ERROR_CATALOG[error_code]


def get_http_status(error_code: str) -> int:
    """Get the default HTTP status for an error code."""
    return get_error(error_code)["http_status"]
