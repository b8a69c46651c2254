"""FastAPI dependency injection for authentication and database."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthError
from app.core.security import verify_session_token
from app.db.session import get_db
from app.repositories.user import UserRepository
from app.services.auth import AuthService
from app.services.mail import Mailer, get_mailer
from app.services.profile import ProfileService

# Bearer scheme; missing credentials are reported as 401 by ``authenticate``.
security = HTTPBearer(auto_error=False)


async def get_user_repository(
    db: AsyncSession = Depends(get_db),
) -> UserRepository:
    """
    Get user repository instance.

    Args:
        db: Database session

    Returns:
        UserRepository instance
    """
    return UserRepository(db)


async def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
    mailer: Mailer = Depends(get_mailer),
) -> AuthService:
    """
    Get authentication service instance.

    Args:
        user_repo: User repository
        mailer: Mail transport used for password recovery

    Returns:
        AuthService instance
    """
    return AuthService(user_repo, mailer)


async def get_profile_service(
    user_repo: UserRepository = Depends(get_user_repository),
) -> ProfileService:
    return ProfileService(user_repo)


async def authenticate(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> int:
    """
    Verify the session token and attach the user ID to the request.

    Args:
        request: Incoming request; ``request.state.user_id`` is set on success
        credentials: HTTP bearer token credentials, if any

    Returns:
        Authenticated user ID

    Raises:
        AuthError: If the token is missing or invalid
        SessionExpiredError: If the token has expired
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("AUTH_002")

    user_id = verify_session_token(credentials.credentials)
    request.state.user_id = user_id
    return user_id


CurrentUserId = Annotated[int, Depends(authenticate)]
