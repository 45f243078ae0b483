"""Profile Pydantic schemas for API request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ProfileFields(BaseModel):
    """Optional profile fields shared by create and update."""

    photo_url: str | None = Field(default=None, max_length=2048, description="URL of the profile photo in object storage")
    job_title: str | None = Field(default=None, max_length=255, description="Job title")
    company: str | None = Field(default=None, max_length=255, description="Company name")
    phone: str | None = Field(default=None, max_length=50, description="Phone number including country code")
    linked_in: str | None = Field(default=None, max_length=512, description="LinkedIn profile URL or handle")
    website: str | None = Field(default=None, max_length=512, description="Personal website")
    bio: str | None = Field(default=None, max_length=2000, description="Short professional bio")

    @field_validator("photo_url", "job_title", "company", "phone", "linked_in", "website", "bio")
    @classmethod
    def strip_optional(cls, value: str | None) -> str | None:
        """Trim whitespace; empty strings clear the field."""
        return _blank_to_none(value)


class ProfileCreate(ProfileFields):
    """Schema for creating the caller's profile at onboarding."""

    display_name: str = Field(..., min_length=1, max_length=255, description="Display name")

    @field_validator("display_name")
    @classmethod
    def display_name_not_blank(cls, value: str) -> str:
        """Reject names that are only whitespace."""
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class ProfileUpdate(ProfileFields):
    """Schema for updating a profile.

    All fields are optional for partial updates. Sending an empty string for
    an optional field clears it.
    """

    display_name: str | None = Field(default=None, max_length=255, description="New display name")

    @field_validator("display_name")
    @classmethod
    def display_name_not_blank(cls, value: str | None) -> str | None:
        """A display name may be changed but never emptied.

        Omitting the field leaves it untouched; an explicit null is rejected.
        """
        value = value.strip() if value is not None else ""
        if not value:
            raise ValueError("Name is required")
        return value


class ProfileResponse(BaseModel):
    """Schema for profile API responses."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID = Field(description="Auth user ID that owns the profile")
    email: str | None = Field(default=None, description="Email address")
    display_name: str = Field(description="Display name")
    photo_url: str | None = None
    job_title: str | None = None
    company: str | None = None
    phone: str | None = None
    linked_in: str | None = None
    website: str | None = None
    bio: str | None = None
    created_at: datetime = Field(description="Profile creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")


class ProfileCard(BaseModel):
    """Public card shown to another user before connecting."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID = Field(description="Auth user ID")
    display_name: str = Field(description="Display name")
    photo_url: str | None = None
    job_title: str | None = None
    company: str | None = None
    bio: str | None = None
