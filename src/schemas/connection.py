"""Connection request and QR handshake schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.models.connection import ConnectionRequestStatus
from src.schemas.contact import ContactResponse
from src.schemas.profile import ProfileCard


class QRCodePayload(BaseModel):
    """Payload encoded in a user's QR code.

    Serialized with the wire names ``type``, ``userId`` and ``timestamp``.
    The timestamp records when the code was generated and is not checked.
    """

    model_config = ConfigDict(populate_by_name=True)

    kind: str = Field(alias="type", description="Literal identifying the connect protocol")
    user_id: UUID = Field(alias="userId", description="User the code belongs to")
    timestamp: int = Field(description="Generation time in epoch milliseconds")


class QRCodeResponse(BaseModel):
    """The caller's QR payload and its serialized form."""

    payload: QRCodePayload = Field(description="Structured payload")
    data: str = Field(description="String to render into the QR image")


class ScanRequest(BaseModel):
    """Raw string read from a QR code."""

    data: str = Field(..., min_length=1, max_length=4096, description="Scanned QR contents")


class ScanPreviewResponse(BaseModel):
    """Profile behind a scanned code and the caller's relationship to it."""

    profile: ProfileCard = Field(description="Scanned user's public card")
    already_connected: bool = Field(description="Caller already has this user as a contact")
    has_pending_request: bool = Field(description="Caller already has a pending request to this user")


class ConnectRequest(ScanRequest):
    """Scanned QR contents plus an optional note for the recipient."""

    message: str | None = Field(default=None, max_length=500, description="Optional message for the recipient")


class SenderSnapshotResponse(BaseModel):
    """Sender's profile as captured when the request was sent."""

    display_name: str
    photo_url: str | None = None
    job_title: str | None = None
    company: str | None = None


class ConnectionRequestResponse(BaseModel):
    """Schema for connection request API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Request unique identifier")
    from_user_id: UUID = Field(description="Sender's user ID")
    to_user_id: UUID = Field(description="Recipient's user ID")
    from_user_profile: SenderSnapshotResponse = Field(description="Sender snapshot at request time")
    status: ConnectionRequestStatus = Field(description="Current request status")
    message: str | None = Field(default=None, description="Optional message from the sender")
    created_at: datetime = Field(description="When the request was sent")
    responded_at: datetime | None = Field(default=None, description="When the request was accepted or declined")


class AcceptResponse(BaseModel):
    """Result of accepting a request."""

    request: ConnectionRequestResponse = Field(description="The accepted request")
    contact: ContactResponse = Field(description="The new contact owned by the accepting user")


class ConnectionStatusResponse(BaseModel):
    """Relationship between the caller and another user."""

    user_id: UUID = Field(description="The other user")
    already_connected: bool
    has_outgoing_request: bool
    has_incoming_request: bool
