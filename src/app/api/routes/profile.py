"""Protected profile endpoints. Every route here requires a session token."""

from fastapi import APIRouter, Depends

from app.api.deps import CurrentUserId, authenticate, get_profile_service
from app.schemas.profile import (
    ProfileOut,
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
)
from app.services.profile import ProfileService

router = APIRouter(
    prefix="/auth",
    tags=["profile"],
    dependencies=[Depends(authenticate)],
)


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Get current user profile",
)
async def get_profile(
    user_id: CurrentUserId,
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """
    Get the authenticated user's profile with address and preferences.

    Raises:
        401: Missing, invalid or expired token
        404: User no longer exists
    """
    user = await profile_service.get_profile(user_id)
    return ProfileResponse(user=ProfileOut.model_validate(user))


@router.put(
    "/profile",
    response_model=ProfileUpdateResponse,
    summary="Update current user profile",
)
async def update_profile(
    data: ProfileUpdateRequest,
    user_id: CurrentUserId,
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileUpdateResponse:
    """
    Update name, birth date, email, address and preferences in one transaction.

    Raises:
        400: Missing name or email
        401: Missing, invalid or expired token
        409: Email belongs to another user
        500: Database error
    """
    user = await profile_service.update_profile(user_id, data)
    return ProfileUpdateResponse(user=ProfileOut.model_validate(user))
