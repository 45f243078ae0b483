"""Profile business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import ConflictError, ProfileNotFoundError
from src.core.supabase import execute_read, execute_write, get_supabase_client
from src.models.profile import CONTACT_SNAPSHOT_FIELDS, SENDER_SNAPSHOT_FIELDS
from src.schemas.profile import ProfileCreate, ProfileUpdate

logger = logging.getLogger(__name__)


def take_snapshot(profile: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    """Copy the given fields out of a profile row by value."""
    return {field: profile.get(field) for field in fields}


class ProfileService:
    """Service for managing user profiles."""

    def __init__(self) -> None:
        """Initialize profile service with Supabase client."""
        self.client = get_supabase_client()

    async def get_profile(self, user_id: UUID) -> dict[str, Any] | None:
        """Get a profile by user ID.

        Args:
            user_id: The auth user ID.

        Returns:
            dict | None: The profile data or None if not found.
        """
        response = execute_read(
            self.client.table("profiles")
            .select("*")
            .eq("user_id", str(user_id))
            .maybe_single()
        )

        return response.data if response and response.data else None

    async def require_profile(self, user_id: UUID) -> dict[str, Any]:
        """Get a profile by user ID or fail.

        Raises:
            ProfileNotFoundError: If the user has no profile.
        """
        profile = await self.get_profile(user_id)
        if not profile:
            raise ProfileNotFoundError()
        return profile

    async def create_profile(
        self,
        user_id: UUID,
        email: str | None,
        data: ProfileCreate,
    ) -> dict[str, Any]:
        """Create the profile for a newly onboarded user.

        Args:
            user_id: The auth user ID.
            email: Email from the auth provider.
            data: Profile fields chosen during onboarding.

        Returns:
            dict: The created profile data.

        Raises:
            ConflictError: If the user already has a profile.
        """
        if await self.get_profile(user_id):
            raise ConflictError("Profile already exists")

        now = datetime.now(timezone.utc).isoformat()
        profile_data = {
            "user_id": str(user_id),
            "email": email,
            **data.model_dump(),
            "created_at": now,
            "updated_at": now,
        }

        response = execute_write(self.client.table("profiles").insert(profile_data))

        logger.info("Created profile for user %s", user_id)
        return response.data[0]

    async def update_profile(
        self,
        user_id: UUID,
        data: ProfileUpdate,
    ) -> dict[str, Any]:
        """Update the caller's own profile.

        Existing contacts and requests keep the snapshots they were created
        with; only the profile row changes.

        Args:
            user_id: The auth user ID.
            data: The fields to update.

        Returns:
            dict: The updated profile data.

        Raises:
            ProfileNotFoundError: If the user has no profile.
        """
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return await self.require_profile(user_id)

        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        response = execute_write(
            self.client.table("profiles")
            .update(update_data)
            .eq("user_id", str(user_id))
        )

        if not response.data:
            raise ProfileNotFoundError()

        return response.data[0]

    @staticmethod
    def sender_snapshot(profile: dict[str, Any]) -> dict[str, Any]:
        """Fields embedded in a connection request."""
        return take_snapshot(profile, SENDER_SNAPSHOT_FIELDS)

    @staticmethod
    def contact_snapshot(profile: dict[str, Any]) -> dict[str, Any]:
        """Fields copied into a contact on acceptance."""
        return take_snapshot(profile, CONTACT_SNAPSHOT_FIELDS)
