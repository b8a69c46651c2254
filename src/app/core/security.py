"""Security utilities for password hashing and JWT token management."""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.core.exceptions import AuthError, SessionExpiredError

# Password hashing with Argon2
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

SESSION_TOKEN_TYPE = "session"
PASSWORD_RESET_TOKEN_TYPE = "password_reset"
SESSION_ROLE = "user"


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        plain_password: Password to verify
        hashed_password: Stored password hash

    Returns:
        True if password matches, False otherwise (including stored values
        that are not a recognised hash)
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def password_fingerprint(hashed_password: str) -> str:
    """Short digest of the stored hash; changes whenever the password does."""
    return hashlib.sha256(hashed_password.encode()).hexdigest()[:16]


def create_session_token(
    user_id: int,
    email: str,
    name: str,
    issued_at: datetime | None = None,
) -> str:
    """
    Create a signed session token for an authenticated user.

    Args:
        user_id: User ID to encode in token
        email: User email, carried as a claim
        name: Display name, carried as a claim
        issued_at: Issue time (defaults to now); expiry is issued_at plus
            ``settings.session_expire_hours``

    Returns:
        Encoded JWT token string
    """
    if issued_at is None:
        issued_at = datetime.now(timezone.utc)

    to_encode = {
        "sub": str(user_id),
        "id": user_id,
        "email": email,
        "nome": name,
        "role": SESSION_ROLE,
        "type": SESSION_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.session_expire_hours),
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_password_reset_token(
    user_id: int, hashed_password: str, issued_at: datetime | None = None
) -> str:
    """
    Create a short-lived token for the password reset link.

    The token is bound to the current password hash, so it stops working as
    soon as the password changes.
    """
    if issued_at is None:
        issued_at = datetime.now(timezone.utc)

    to_encode = {
        "sub": str(user_id),
        "type": PASSWORD_RESET_TOKEN_TYPE,
        "pwd": password_fingerprint(hashed_password),
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.password_reset_expire_minutes),
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        JWTError: If token is invalid or expired
    """
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def verify_session_token(token: str) -> int:
    """
    Verify a session token and return the user ID it carries.

    Raises:
        SessionExpiredError: If the token is past its expiry
        AuthError: If the token is malformed, tampered with or not a session token
    """
    try:
        payload = decode_token(token)
    except ExpiredSignatureError as e:
        raise SessionExpiredError() from e
    except JWTError as e:
        raise AuthError("AUTH_003") from e

    if payload.get("type") != SESSION_TOKEN_TYPE:
        raise AuthError("AUTH_003")

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise AuthError("AUTH_003") from e


def decode_password_reset_token(token: str) -> tuple[int, str]:
    """
    Decode a password reset token.

    Returns:
        Tuple of (user ID, password fingerprint)

    Raises:
        AuthError: AUTH_006 for any invalid, expired or foreign token
    """
    try:
        payload = decode_token(token)
    except JWTError as e:
        raise AuthError("AUTH_006") from e

    if payload.get("type") != PASSWORD_RESET_TOKEN_TYPE or "pwd" not in payload:
        raise AuthError("AUTH_006")

    try:
        return int(payload["sub"]), payload["pwd"]
    except (KeyError, TypeError, ValueError) as e:
        raise AuthError("AUTH_006") from e
