"""Unit tests for ProfileService."""

from uuid import UUID

import pytest
from pydantic import ValidationError

from src.api.middleware.error_handler import ConflictError, ProfileNotFoundError
from src.schemas.profile import ProfileCreate, ProfileUpdate
from src.services.profile_service import ProfileService, take_snapshot

USER_ID = "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def profile_service(fake_supabase) -> ProfileService:
    """Create ProfileService against the in-memory database."""
    return ProfileService()


class TestCreateProfile:
    """Tests for create_profile method."""

    @pytest.mark.asyncio
    async def test_creates_profile_with_auth_email(self, profile_service: ProfileService) -> None:
        """Test that the profile is stored with the email from the token."""
        profile = await profile_service.create_profile(
            UUID(USER_ID),
            "alice@example.com",
            ProfileCreate(display_name="  Alice Ng ", company="Acme", bio=""),
        )

        assert profile["user_id"] == USER_ID
        assert profile["email"] == "alice@example.com"
        assert profile["display_name"] == "Alice Ng"
        assert profile["company"] == "Acme"
        assert profile["bio"] is None
        assert profile["created_at"] == profile["updated_at"]

    @pytest.mark.asyncio
    async def test_rejects_second_profile(self, profile_service: ProfileService, profile_factory) -> None:
        """Test that ConflictError is raised when the profile exists."""
        profile_factory(USER_ID, "Alice Ng")

        with pytest.raises(ConflictError):
            await profile_service.create_profile(UUID(USER_ID), None, ProfileCreate(display_name="Alice"))

    def test_blank_display_name_is_invalid(self) -> None:
        """Test that a whitespace-only name fails validation."""
        with pytest.raises(ValidationError):
            ProfileCreate(display_name="   ")


class TestGetProfile:
    """Tests for get_profile and require_profile."""

    @pytest.mark.asyncio
    async def test_returns_none_when_missing(self, profile_service: ProfileService) -> None:
        """Test that None is returned for a user without a profile."""
        assert await profile_service.get_profile(UUID(USER_ID)) is None

    @pytest.mark.asyncio
    async def test_require_raises_when_missing(self, profile_service: ProfileService) -> None:
        """Test that require_profile raises ProfileNotFoundError."""
        with pytest.raises(ProfileNotFoundError):
            await profile_service.require_profile(UUID(USER_ID))


class TestUpdateProfile:
    """Tests for update_profile method."""

    @pytest.mark.asyncio
    async def test_updates_only_provided_fields(self, profile_service: ProfileService, profile_factory) -> None:
        """Test that unset fields are left alone."""
        profile_factory(USER_ID, "Alice Ng", company="Acme", job_title="Engineer")

        updated = await profile_service.update_profile(UUID(USER_ID), ProfileUpdate(job_title="CTO"))

        assert updated["job_title"] == "CTO"
        assert updated["company"] == "Acme"
        assert updated["updated_at"] != "2024-01-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_empty_string_clears_optional_field(
        self, profile_service: ProfileService, profile_factory
    ) -> None:
        """Test that sending an empty string clears a field."""
        profile_factory(USER_ID, "Alice Ng", company="Acme")

        updated = await profile_service.update_profile(UUID(USER_ID), ProfileUpdate(company=""))

        assert updated["company"] is None

    def test_null_display_name_is_invalid(self) -> None:
        """Test that display_name cannot be cleared with an explicit null."""
        with pytest.raises(ValidationError):
            ProfileUpdate(display_name=None, website="https://alice.dev")

    @pytest.mark.asyncio
    async def test_omitted_display_name_is_kept(self, profile_service: ProfileService, profile_factory) -> None:
        """Test that leaving display_name out keeps the current name."""
        profile_factory(USER_ID, "Alice Ng")

        updated = await profile_service.update_profile(UUID(USER_ID), ProfileUpdate(website="https://alice.dev"))

        assert updated["display_name"] == "Alice Ng"
        assert updated["website"] == "https://alice.dev"

    @pytest.mark.asyncio
    async def test_raises_when_profile_missing(self, profile_service: ProfileService) -> None:
        """Test that updating a missing profile raises ProfileNotFoundError."""
        with pytest.raises(ProfileNotFoundError):
            await profile_service.update_profile(UUID(USER_ID), ProfileUpdate(company="Acme"))


class TestSnapshots:
    """Tests for snapshot helpers."""

    def test_sender_snapshot_is_the_public_card(self) -> None:
        """Test that the sender snapshot carries only card fields."""
        profile = {"display_name": "Alice", "photo_url": None, "job_title": "Eng", "company": "Acme", "phone": "1"}

        assert ProfileService.sender_snapshot(profile) == {
            "display_name": "Alice",
            "photo_url": None,
            "job_title": "Eng",
            "company": "Acme",
        }

    def test_snapshot_is_a_copy(self) -> None:
        """Test that changing the profile afterwards leaves the snapshot unchanged."""
        profile = {"display_name": "Alice", "company": "Acme"}
        snapshot = take_snapshot(profile, ("display_name", "company"))

        profile["company"] = "Globex"

        assert snapshot["company"] == "Acme"

    def test_contact_snapshot_includes_contact_details(self) -> None:
        """Test that contact snapshots include email, phone and links."""
        snapshot = ProfileService.contact_snapshot({"display_name": "Alice", "email": "a@x.io", "phone": "1"})

        assert snapshot["email"] == "a@x.io"
        assert snapshot["phone"] == "1"
        assert snapshot["linked_in"] is None
        assert "user_id" not in snapshot
