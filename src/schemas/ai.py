"""Schemas for AI summary and follow-up generation."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class FollowUpTone(str, Enum):
    """Tone of a generated follow-up message."""

    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    CASUAL = "casual"


class FollowUpPurpose(str, Enum):
    """Why the follow-up is being sent."""

    FOLLOW_UP = "follow_up"
    THANK_YOU = "thank_you"
    MEETING_REQUEST = "meeting_request"
    CUSTOM = "custom"


class FollowUpRequest(BaseModel):
    """Options for drafting a follow-up message."""

    tone: FollowUpTone = Field(default=FollowUpTone.PROFESSIONAL)
    channel: str = Field(default="Email", min_length=1, max_length=50, description="Where the message will be sent")
    purpose: FollowUpPurpose = Field(default=FollowUpPurpose.FOLLOW_UP)
    instructions: str | None = Field(
        default=None,
        max_length=500,
        description="Extra guidance, used mainly with the custom purpose",
    )


class FollowUpResponse(BaseModel):
    """Drafted follow-up message. Not stored."""

    message: str


class SummaryResponse(BaseModel):
    """Regenerated relationship summary."""

    contact_id: UUID
    summary: str
