"""Contact Pydantic schemas for API request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContactResponse(BaseModel):
    """Schema for contact API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Contact unique identifier")
    user_id: UUID = Field(description="Owner of this contact")
    contact_user_id: UUID = Field(description="The connected user's ID")
    display_name: str
    photo_url: str | None = None
    job_title: str | None = None
    company: str | None = None
    email: str | None = None
    phone: str | None = None
    linked_in: str | None = None
    website: str | None = None
    bio: str | None = None
    notes: str | None = Field(default=None, description="Owner's private notes")
    tags: list[str] = Field(default_factory=list, description="Owner's tags")
    ai_summary: str | None = Field(default=None, description="AI-generated relationship summary")
    met_at: str | None = Field(default=None, description="Event or place where they met")
    connected_at: datetime = Field(description="When the connection was accepted")
    last_interaction_at: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def null_tags(cls, value: list[str] | None) -> list[str]:
        return value or []


class ContactUpdate(BaseModel):
    """Owner-private annotations that can be edited on a contact."""

    notes: str | None = Field(default=None, max_length=5000)
    tags: list[str] | None = Field(default=None, max_length=20)
    met_at: str | None = Field(default=None, max_length=255)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value: list[str] | None) -> list[str] | None:
        """Trim tags and drop empties and duplicates, keeping order."""
        if value is None:
            return None
        seen: list[str] = []
        for tag in value:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        return seen
