"""Connection request routes for listing, accepting and declining."""

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks

from src.api.deps import CurrentUser
from src.schemas.connection import AcceptResponse, ConnectionRequestResponse
from src.schemas.contact import ContactResponse
from src.services.ai_service import AIService
from src.services.connection_service import ConnectionService

router = APIRouter(prefix="/connection-requests", tags=["connection-requests"])


@router.get(
    "/incoming",
    response_model=list[ConnectionRequestResponse],
    summary="List incoming requests",
    description="Pending requests sent to the authenticated user, newest first.",
)
async def list_incoming(user: CurrentUser) -> list[ConnectionRequestResponse]:
    service = ConnectionService()
    requests = await service.list_incoming_requests(user.user_id)
    return [ConnectionRequestResponse(**r) for r in requests]


@router.get(
    "/outgoing",
    response_model=list[ConnectionRequestResponse],
    summary="List outgoing requests",
    description="Pending requests the authenticated user has sent, newest first.",
)
async def list_outgoing(user: CurrentUser) -> list[ConnectionRequestResponse]:
    service = ConnectionService()
    requests = await service.list_outgoing_requests(user.user_id)
    return [ConnectionRequestResponse(**r) for r in requests]


@router.get(
    "/{request_id}",
    response_model=ConnectionRequestResponse,
    summary="Get a request",
    description="Returns a request the authenticated user sent or received.",
)
async def get_request(request_id: UUID, user: CurrentUser) -> ConnectionRequestResponse:
    service = ConnectionService()
    request = await service.get_request_for_user(request_id, user.user_id)
    return ConnectionRequestResponse(**request)


@router.post(
    "/{request_id}/accept",
    response_model=AcceptResponse,
    summary="Accept a request",
    description="Accepts a pending request and adds each user to the other's contacts.",
)
async def accept_request(
    request_id: UUID,
    user: CurrentUser,
    background_tasks: BackgroundTasks,
) -> AcceptResponse:
    """Accept a pending connection request.

    A relationship summary for the new connection is generated after the
    response is sent.

    Raises:
        PermissionDeniedError: 403 if the caller is not the recipient.
        InvalidStateTransitionError: 409 if the request is not pending.
        ProfileNotFoundError: 404 if either profile is gone.
    """
    service = ConnectionService()
    request, contacts = await service.accept_request(request_id, user.user_id)

    background_tasks.add_task(
        AIService().summarize_new_connection,
        UUID(request["from_user_id"]),
        UUID(request["to_user_id"]),
    )

    return AcceptResponse(
        request=ConnectionRequestResponse(**request),
        contact=ContactResponse(**contacts[0]),
    )


@router.post(
    "/{request_id}/decline",
    response_model=ConnectionRequestResponse,
    summary="Decline a request",
    description="Declines a pending request. No contacts are created.",
)
async def decline_request(request_id: UUID, user: CurrentUser) -> ConnectionRequestResponse:
    """Decline a pending connection request.

    Raises:
        PermissionDeniedError: 403 if the caller is not the recipient.
        InvalidStateTransitionError: 409 if the request is not pending.
    """
    service = ConnectionService()
    request = await service.decline_request(request_id, user.user_id)
    return ConnectionRequestResponse(**request)
