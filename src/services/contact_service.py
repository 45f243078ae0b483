"""Contact ledger business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import NotFoundError, PermissionDeniedError
from src.core.supabase import execute_read, execute_write, get_supabase_client
from src.schemas.contact import ContactUpdate

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("display_name", "company", "job_title")


def matches_search(contact: dict[str, Any], search: str) -> bool:
    """Case-insensitive substring match on name, company or job title."""
    needle = search.strip().lower()
    if not needle:
        return True
    return any(needle in (contact.get(field) or "").lower() for field in SEARCH_FIELDS)


class ContactService:
    """Service for reading and annotating a user's contacts."""

    def __init__(self) -> None:
        """Initialize contact service with Supabase client."""
        self.client = get_supabase_client()

    async def list_contacts(
        self,
        user_id: UUID,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        """List the user's contacts alphabetically.

        Args:
            user_id: Owner of the contacts.
            search: Optional filter on display name, company or job title.

        Returns:
            list[dict]: Contact rows.
        """
        response = execute_read(
            self.client.table("contacts")
            .select("*")
            .eq("user_id", str(user_id))
            .order("display_name")
        )

        contacts = response.data or []
        if search:
            contacts = [c for c in contacts if matches_search(c, search)]
        return contacts

    async def list_recent_contacts(self, user_id: UUID, limit: int) -> list[dict[str, Any]]:
        """List the user's most recently connected contacts."""
        response = execute_read(
            self.client.table("contacts")
            .select("*")
            .eq("user_id", str(user_id))
            .order("connected_at", desc=True)
            .limit(limit)
        )

        return response.data or []

    async def find_contact(self, user_id: UUID, other_user_id: UUID) -> dict[str, Any] | None:
        """Find the user's contact row for another user, if any."""
        response = execute_read(
            self.client.table("contacts")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("contact_user_id", str(other_user_id))
            .limit(1)
        )

        return response.data[0] if response.data else None

    async def get_contact(self, contact_id: UUID, user_id: UUID) -> dict[str, Any]:
        """Get a contact owned by the user.

        Raises:
            NotFoundError: If the contact does not exist.
            PermissionDeniedError: If the contact belongs to someone else.
        """
        response = execute_read(
            self.client.table("contacts")
            .select("*")
            .eq("id", str(contact_id))
            .maybe_single()
        )

        contact = response.data if response and response.data else None
        if not contact:
            raise NotFoundError("Contact not found")

        if contact["user_id"] != str(user_id):
            raise PermissionDeniedError("You do not own this contact")

        return contact

    async def update_contact(
        self,
        contact_id: UUID,
        user_id: UUID,
        data: ContactUpdate,
    ) -> dict[str, Any]:
        """Update the owner's private annotations on a contact.

        The other party's copy of the connection is never touched.
        """
        contact = await self.get_contact(contact_id, user_id)

        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return contact

        update_data["last_interaction_at"] = datetime.now(timezone.utc).isoformat()

        response = execute_write(
            self.client.table("contacts")
            .update(update_data)
            .eq("id", str(contact_id))
            .eq("user_id", str(user_id))
        )

        if not response.data:
            raise NotFoundError("Contact not found")

        return response.data[0]

    async def delete_contact(self, contact_id: UUID, user_id: UUID) -> None:
        """Delete the caller's contact row. The other party keeps theirs."""
        await self.get_contact(contact_id, user_id)

        execute_write(
            self.client.table("contacts")
            .delete()
            .eq("id", str(contact_id))
            .eq("user_id", str(user_id))
        )

        logger.info("User %s deleted contact %s", user_id, contact_id)

    async def set_ai_summary(self, contact_id: UUID, summary: str) -> dict[str, Any]:
        """Store a generated summary on one contact."""
        response = execute_write(
            self.client.table("contacts")
            .update({"ai_summary": summary})
            .eq("id", str(contact_id))
        )

        if not response.data:
            raise NotFoundError("Contact not found")

        return response.data[0]

    async def set_pair_summary(self, user_a: UUID, user_b: UUID, summary: str) -> int:
        """Store the same summary on both contacts of a connection.

        Returns:
            int: Number of contact rows updated.
        """
        updated = 0
        for owner, other in ((user_a, user_b), (user_b, user_a)):
            response = execute_write(
                self.client.table("contacts")
                .update({"ai_summary": summary})
                .eq("user_id", str(owner))
                .eq("contact_user_id", str(other))
            )
            updated += len(response.data or [])

        return updated
