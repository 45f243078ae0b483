"""Connection request model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict
from uuid import UUID


class ConnectionRequestStatus(str, Enum):
    """Connection request status values matching database enum."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class SenderSnapshot(TypedDict, total=False):
    """Sender's profile fields as they were when the request was sent."""

    display_name: str
    photo_url: str | None
    job_title: str | None
    company: str | None


class ConnectionRequest(TypedDict):
    """Connection request table row representation."""

    id: UUID
    from_user_id: UUID
    to_user_id: UUID
    from_user_profile: SenderSnapshot
    status: ConnectionRequestStatus
    message: str | None
    created_at: datetime
    responded_at: datetime | None
