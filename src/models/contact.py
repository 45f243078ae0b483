"""Contact model type definitions for database operations."""

from datetime import datetime
from typing import TypedDict
from uuid import UUID


class Contact(TypedDict):
    """Contact table row representation.

    One row per direction of an accepted connection. The profile fields are a
    copy of the other party's profile at acceptance time; notes, tags,
    ai_summary and met_at belong to the owner alone.
    """

    id: UUID
    user_id: UUID
    contact_user_id: UUID
    display_name: str
    photo_url: str | None
    job_title: str | None
    company: str | None
    email: str | None
    phone: str | None
    linked_in: str | None
    website: str | None
    bio: str | None
    notes: str | None
    tags: list[str]
    ai_summary: str | None
    met_at: str | None
    connected_at: datetime
    last_interaction_at: datetime | None
