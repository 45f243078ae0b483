"""QR connect routes: show my code, scan a code, send a request."""

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, status

from src.api.deps import CurrentUser
from src.schemas.connection import (
    ConnectionRequestResponse,
    ConnectionStatusResponse,
    ConnectRequest,
    QRCodeResponse,
    ScanPreviewResponse,
    ScanRequest,
)
from src.schemas.profile import ProfileCard
from src.services.ai_service import AIService
from src.services.connection_service import ACCEPTED, ConnectionService
from src.services.profile_service import ProfileService
from src.services.qr_service import QRService

router = APIRouter(prefix="/connect", tags=["connect"])


@router.get(
    "/qr",
    response_model=QRCodeResponse,
    summary="Get my QR payload",
    description="Returns the payload to render in the caller's QR code.",
)
async def get_my_qr(user: CurrentUser) -> QRCodeResponse:
    """Build the caller's QR payload.

    Requires an existing profile so a scanner never resolves to nothing.
    """
    qr_service = QRService()
    await qr_service.profile_service.require_profile(user.user_id)
    payload, data = qr_service.build_payload(user.user_id)
    return QRCodeResponse(payload=payload, data=data)


@router.post(
    "/scan",
    response_model=ScanPreviewResponse,
    summary="Preview a scanned QR code",
    description="Validates scanned QR contents and returns the profile it points to. Nothing is written.",
)
async def scan_qr(data: ScanRequest, user: CurrentUser) -> ScanPreviewResponse:
    """Validate scanned contents and preview the other user.

    Raises:
        InvalidPayloadError: 422 if this is not a connect code.
        SelfConnectError: 422 if the caller scanned their own code.
        ProfileNotFoundError: 404 if the user has no profile.
    """
    profile_service = ProfileService()
    qr_service = QRService(profile_service)
    connection_service = ConnectionService(profile_service)

    profile = await qr_service.resolve_scan(data.data, user.user_id)
    other_id = UUID(profile["user_id"])

    return ScanPreviewResponse(
        profile=ProfileCard(**profile),
        already_connected=await connection_service.is_already_connected(user.user_id, other_id),
        has_pending_request=await connection_service.has_existing_request(user.user_id, other_id),
    )


@router.post(
    "",
    response_model=ConnectionRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a connection request from a scanned code",
    description="Validates scanned QR contents and sends a connection request to that user.",
)
async def connect_from_qr(
    data: ConnectRequest,
    user: CurrentUser,
    background_tasks: BackgroundTasks,
) -> ConnectionRequestResponse:
    """Send a connection request to the user behind a scanned code.

    Depending on the mutual request policy the response may be an already
    accepted request, when the other user had asked first. The new
    connection then gets its relationship summary after the response is sent.
    """
    profile_service = ProfileService()
    qr_service = QRService(profile_service)
    connection_service = ConnectionService(profile_service)

    profile = await qr_service.resolve_scan(data.data, user.user_id)
    request = await connection_service.send_request(
        from_user_id=user.user_id,
        to_user_id=UUID(profile["user_id"]),
        message=data.message,
    )

    if request["status"] == ACCEPTED:
        background_tasks.add_task(
            AIService().summarize_new_connection,
            UUID(request["from_user_id"]),
            UUID(request["to_user_id"]),
        )

    return ConnectionRequestResponse(**request)


@router.get(
    "/status/{user_id}",
    response_model=ConnectionStatusResponse,
    summary="Relationship with another user",
    description="Whether the caller is connected to, or has pending requests with, another user.",
)
async def get_connection_status(user_id: UUID, user: CurrentUser) -> ConnectionStatusResponse:
    service = ConnectionService()
    return ConnectionStatusResponse(
        user_id=user_id,
        already_connected=await service.is_already_connected(user.user_id, user_id),
        has_outgoing_request=await service.has_existing_request(user.user_id, user_id),
        has_incoming_request=await service.has_existing_request(user_id, user.user_id),
    )
