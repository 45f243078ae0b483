"""Profile model type definitions for database operations."""

from datetime import datetime
from typing import TypedDict
from uuid import UUID


class Profile(TypedDict):
    """Profile table row representation.

    Keyed by the auth provider's user id; one row per user.
    """

    user_id: UUID
    email: str | None
    display_name: str
    photo_url: str | None
    job_title: str | None
    company: str | None
    phone: str | None
    linked_in: str | None
    website: str | None
    bio: str | None
    created_at: datetime
    updated_at: datetime


# Fields copied into a Contact when a connection is accepted
CONTACT_SNAPSHOT_FIELDS: tuple[str, ...] = (
    "display_name",
    "photo_url",
    "job_title",
    "company",
    "email",
    "phone",
    "linked_in",
    "website",
    "bio",
)

# Fields copied into a ConnectionRequest when it is sent
SENDER_SNAPSHOT_FIELDS: tuple[str, ...] = (
    "display_name",
    "photo_url",
    "job_title",
    "company",
)
