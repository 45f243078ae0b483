"""Contact ledger routes, including AI summary and follow-up generation."""

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from src.api.deps import AIRateLimit, CurrentUser
from src.core.config import get_settings
from src.schemas.ai import FollowUpRequest, FollowUpResponse, SummaryResponse
from src.schemas.contact import ContactResponse, ContactUpdate
from src.services.ai_service import AIService
from src.services.contact_service import ContactService

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get(
    "",
    response_model=list[ContactResponse],
    summary="List my contacts",
    description="Returns the authenticated user's contacts alphabetically, optionally filtered.",
)
async def list_contacts(
    user: CurrentUser,
    search: str | None = Query(default=None, max_length=100, description="Match on name, company or job title"),
) -> list[ContactResponse]:
    service = ContactService()
    contacts = await service.list_contacts(user.user_id, search)
    return [ContactResponse(**c) for c in contacts]


@router.get(
    "/recent",
    response_model=list[ContactResponse],
    summary="List recent contacts",
    description="Returns the most recently connected contacts.",
)
async def list_recent_contacts(user: CurrentUser) -> list[ContactResponse]:
    service = ContactService()
    contacts = await service.list_recent_contacts(user.user_id, get_settings().recent_contacts_limit)
    return [ContactResponse(**c) for c in contacts]


@router.get(
    "/{contact_id}",
    response_model=ContactResponse,
    summary="Get a contact",
)
async def get_contact(contact_id: UUID, user: CurrentUser) -> ContactResponse:
    service = ContactService()
    contact = await service.get_contact(contact_id, user.user_id)
    return ContactResponse(**contact)


@router.patch(
    "/{contact_id}",
    response_model=ContactResponse,
    summary="Update contact notes",
    description="Updates the caller's private notes, tags or meeting context on a contact.",
)
async def update_contact(contact_id: UUID, data: ContactUpdate, user: CurrentUser) -> ContactResponse:
    service = ContactService()
    contact = await service.update_contact(contact_id, user.user_id, data)
    return ContactResponse(**contact)


@router.delete(
    "/{contact_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a contact",
    description="Removes the contact from the caller's list. The other user's list is unchanged.",
)
async def delete_contact(contact_id: UUID, user: CurrentUser) -> Response:
    service = ContactService()
    await service.delete_contact(contact_id, user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{contact_id}/summary",
    response_model=SummaryResponse,
    summary="Regenerate AI summary",
    description="Generates a new relationship summary for the contact and stores it.",
)
async def regenerate_summary(contact_id: UUID, user: CurrentUser, _: AIRateLimit) -> SummaryResponse:
    """Regenerate the AI summary on one of the caller's contacts.

    Raises:
        TextGenerationError: 502 if the text endpoint fails.
    """
    contact = await AIService().summarize_contact(contact_id, user.user_id)
    return SummaryResponse(contact_id=contact_id, summary=contact["ai_summary"])


@router.post(
    "/{contact_id}/follow-up",
    response_model=FollowUpResponse,
    summary="Draft a follow-up message",
    description="Drafts a follow-up message to the contact. The draft is not stored.",
)
async def draft_follow_up(
    contact_id: UUID,
    options: FollowUpRequest,
    user: CurrentUser,
    _: AIRateLimit,
) -> FollowUpResponse:
    message = await AIService().generate_follow_up(contact_id, user.user_id, options)
    return FollowUpResponse(message=message)
