"""Profile API routes."""

from uuid import UUID

from fastapi import APIRouter, status

from src.api.deps import CurrentUser
from src.schemas.profile import ProfileCard, ProfileCreate, ProfileResponse, ProfileUpdate
from src.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create my profile",
    description="Creates the authenticated user's profile during onboarding.",
)
async def create_my_profile(data: ProfileCreate, user: CurrentUser) -> ProfileResponse:
    """Create the authenticated user's profile.

    Raises:
        ConflictError: 409 if the profile already exists.
    """
    service = ProfileService()
    profile = await service.create_profile(user.user_id, user.email, data)
    return ProfileResponse(**profile)


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get current user's profile",
    description="Returns the authenticated user's profile information.",
)
async def get_my_profile(user: CurrentUser) -> ProfileResponse:
    """Get the authenticated user's profile.

    Raises:
        ProfileNotFoundError: 404 if onboarding has not created one yet.
    """
    service = ProfileService()
    profile = await service.require_profile(user.user_id)
    return ProfileResponse(**profile)


@router.put(
    "/me",
    response_model=ProfileResponse,
    summary="Update current user's profile",
    description="Updates the authenticated user's profile with provided fields.",
)
async def update_my_profile(data: ProfileUpdate, user: CurrentUser) -> ProfileResponse:
    """Update the authenticated user's profile.

    Contacts other users already hold keep their existing snapshot.
    """
    service = ProfileService()
    profile = await service.update_profile(user.user_id, data)
    return ProfileResponse(**profile)


@router.get(
    "/{user_id}",
    response_model=ProfileCard,
    summary="Get a user's public card",
    description="Returns the public card of another user.",
)
async def get_profile_card(user_id: UUID, user: CurrentUser) -> ProfileCard:
    service = ProfileService()
    profile = await service.require_profile(user_id)
    return ProfileCard(**profile)
