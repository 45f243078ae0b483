"""Connection lifecycle: sending, accepting and declining connection requests."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import (
    ConflictError,
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    SelfConnectError,
)
from src.core.config import get_settings
from src.core.supabase import execute_read, execute_write, get_supabase_client
from src.models.connection import ConnectionRequestStatus
from src.services.contact_service import ContactService
from src.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

PENDING = ConnectionRequestStatus.PENDING.value
ACCEPTED = ConnectionRequestStatus.ACCEPTED.value
DECLINED = ConnectionRequestStatus.DECLINED.value


class ConnectionService:
    """Service owning the connection request lifecycle.

    A request moves from pending to accepted or declined exactly once.
    Acceptance fans out into two independent contact rows, one owned by
    each user, each holding a snapshot of the other user's profile at the
    moment of acceptance.
    """

    def __init__(self, profile_service: ProfileService | None = None) -> None:
        """Initialize connection service with Supabase client."""
        self.client = get_supabase_client()
        self.settings = get_settings()
        self.profile_service = profile_service or ProfileService()
        self.contact_service = ContactService()

    async def get_request(self, request_id: UUID) -> dict[str, Any] | None:
        """Get a connection request by ID.

        Args:
            request_id: The request's UUID.

        Returns:
            dict | None: The request data or None if not found.
        """
        response = execute_read(
            self.client.table("connection_requests")
            .select("*")
            .eq("id", str(request_id))
            .maybe_single()
        )

        return response.data if response and response.data else None

    async def get_request_for_user(self, request_id: UUID, user_id: UUID) -> dict[str, Any]:
        """Get a request the user is a party to.

        Raises:
            NotFoundError: If the request does not exist.
            PermissionDeniedError: If the user is neither sender nor recipient.
        """
        request = await self.get_request(request_id)
        if not request:
            raise NotFoundError("Connection request not found")

        if str(user_id) not in (request["from_user_id"], request["to_user_id"]):
            raise PermissionDeniedError("You are not part of this connection request")

        return request

    async def list_incoming_requests(self, user_id: UUID) -> list[dict[str, Any]]:
        """List pending requests sent to the user, newest first."""
        response = execute_read(
            self.client.table("connection_requests")
            .select("*")
            .eq("to_user_id", str(user_id))
            .eq("status", PENDING)
            .order("created_at", desc=True)
        )

        return response.data or []

    async def list_outgoing_requests(self, user_id: UUID) -> list[dict[str, Any]]:
        """List pending requests the user has sent, newest first."""
        response = execute_read(
            self.client.table("connection_requests")
            .select("*")
            .eq("from_user_id", str(user_id))
            .eq("status", PENDING)
            .order("created_at", desc=True)
        )

        return response.data or []

    async def is_already_connected(self, user_id: UUID, other_user_id: UUID) -> bool:
        """Check whether the user already has the other user as a contact.

        Only the asking user's side of the ledger is consulted.
        """
        return await self.contact_service.find_contact(user_id, other_user_id) is not None

    async def has_existing_request(self, from_user_id: UUID, to_user_id: UUID) -> bool:
        """Check for a pending request in the from -> to direction only."""
        return await self._find_pending(from_user_id, to_user_id) is not None

    async def _find_pending(self, from_user_id: UUID, to_user_id: UUID) -> dict[str, Any] | None:
        response = execute_read(
            self.client.table("connection_requests")
            .select("*")
            .eq("from_user_id", str(from_user_id))
            .eq("to_user_id", str(to_user_id))
            .eq("status", PENDING)
            .limit(1)
        )

        return response.data[0] if response.data else None

    async def send_request(
        self,
        from_user_id: UUID,
        to_user_id: UUID,
        message: str | None = None,
    ) -> dict[str, Any]:
        """Send a connection request carrying a snapshot of the sender.

        When the recipient already has a pending request to the sender, the
        outcome depends on the ``mutual_request_policy`` setting:
        ``independent`` creates a second request, ``auto_accept`` accepts the
        existing one on the sender's behalf and returns it.

        Args:
            from_user_id: The sender (the user who scanned).
            to_user_id: The recipient (the user whose code was scanned).
            message: Optional note for the recipient.

        Returns:
            dict: The new pending request, or the accepted reverse request.

        Raises:
            SelfConnectError: If sender and recipient are the same user.
            ProfileNotFoundError: If either user has no profile.
            ConflictError: If already connected or a request is already pending.
        """
        if from_user_id == to_user_id:
            raise SelfConnectError()

        await self.profile_service.require_profile(to_user_id)
        sender = await self.profile_service.require_profile(from_user_id)

        if await self.is_already_connected(from_user_id, to_user_id):
            raise ConflictError("You are already connected with this user")

        if await self.has_existing_request(from_user_id, to_user_id):
            raise ConflictError("A connection request is already pending")

        if self.settings.mutual_request_policy == "auto_accept":
            reverse = await self._find_pending(to_user_id, from_user_id)
            if reverse:
                logger.info(
                    "Mutual request between %s and %s, accepting %s",
                    from_user_id,
                    to_user_id,
                    reverse["id"],
                )
                accepted, _ = await self.accept_request(UUID(reverse["id"]), from_user_id)
                return accepted

        request_data = {
            "from_user_id": str(from_user_id),
            "to_user_id": str(to_user_id),
            "from_user_profile": ProfileService.sender_snapshot(sender),
            "status": PENDING,
            "message": message,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        response = execute_write(self.client.table("connection_requests").insert(request_data))

        request = response.data[0]
        logger.info("Connection request %s sent from %s to %s", request["id"], from_user_id, to_user_id)
        return request

    async def accept_request(
        self,
        request_id: UUID,
        accepting_user_id: UUID,
    ) -> tuple[dict[str, Any], list[dict[str, Any]]]:
        """Accept a pending request and make sure both contact rows exist.

        The request is claimed with a conditional update that only matches
        while it is still pending, so concurrent accepts fan out at most once.
        Each user ends up with exactly one contact row for the other. A row
        left over from an earlier connection (mutual requests, or a reconnect
        after one side deleted theirs) gets a fresh snapshot and only the
        missing rows are inserted, in one statement. If the fan-out fails the
        claim is rolled back to pending so the request can be accepted again.

        Args:
            request_id: The request's UUID.
            accepting_user_id: The user accepting; must be the recipient.

        Returns:
            tuple: The accepted request and both users' contacts, the
            accepting user's contact first.

        Raises:
            NotFoundError: If the request does not exist.
            PermissionDeniedError: If the accepting user is not the recipient.
            InvalidStateTransitionError: If the request is not pending.
            ProfileNotFoundError: If either profile no longer exists.
        """
        request = await self.get_request(request_id)
        if not request:
            raise NotFoundError("Connection request not found")

        if request["to_user_id"] != str(accepting_user_id):
            raise PermissionDeniedError("Only the recipient can accept this request")

        if request["status"] != PENDING:
            raise InvalidStateTransitionError(
                f"Connection request has already been {request['status']}"
            )

        requester_id = UUID(request["from_user_id"])
        requester = await self.profile_service.require_profile(requester_id)
        accepter = await self.profile_service.require_profile(accepting_user_id)

        accepter_row = await self.contact_service.find_contact(accepting_user_id, requester_id)
        requester_row = await self.contact_service.find_contact(requester_id, accepting_user_id)
        # (owner, the other user's profile, owner's existing row for them)
        directions = [
            (accepting_user_id, requester, accepter_row),
            (requester_id, accepter, requester_row),
        ]

        now = datetime.now(timezone.utc).isoformat()
        claimed = await self._transition(request_id, ACCEPTED, now)

        try:
            contacts = self._fan_out(request_id, directions, now)
        except Exception:
            logger.error("Contact fan-out failed for request %s, reverting to pending", request_id)
            self._revert_claim(request_id)
            raise

        logger.info(
            "Connection request %s accepted: %s <-> %s",
            request_id,
            requester_id,
            accepting_user_id,
        )
        return claimed, contacts

    async def decline_request(self, request_id: UUID, declining_user_id: UUID) -> dict[str, Any]:
        """Decline a pending request. No contacts are created.

        Declining a request that is no longer pending is rejected.

        Raises:
            NotFoundError: If the request does not exist.
            PermissionDeniedError: If the declining user is not the recipient.
            InvalidStateTransitionError: If the request is not pending.
        """
        request = await self.get_request(request_id)
        if not request:
            raise NotFoundError("Connection request not found")

        if request["to_user_id"] != str(declining_user_id):
            raise PermissionDeniedError("Only the recipient can decline this request")

        if request["status"] != PENDING:
            raise InvalidStateTransitionError(
                f"Connection request has already been {request['status']}"
            )

        declined = await self._transition(request_id, DECLINED, datetime.now(timezone.utc).isoformat())
        logger.info("Connection request %s declined by %s", request_id, declining_user_id)
        return declined

    async def _transition(self, request_id: UUID, new_status: str, responded_at: str) -> dict[str, Any]:
        """Move a request out of pending if, and only if, it is still pending."""
        response = execute_write(
            self.client.table("connection_requests")
            .update({"status": new_status, "responded_at": responded_at})
            .eq("id", str(request_id))
            .eq("status", PENDING)
        )

        if not response.data:
            raise InvalidStateTransitionError()

        return response.data[0]

    def _fan_out(
        self,
        request_id: UUID,
        directions: list[tuple[UUID, dict[str, Any], dict[str, Any] | None]],
        connected_at: str,
    ) -> list[dict[str, Any]]:
        """Refresh existing contact rows and insert the missing ones.

        Returns:
            list: One contact per direction, in the order given.

        Raises:
            ConflictError: If a direction ends up without a row.
        """
        contacts: list[dict[str, Any] | None] = [None] * len(directions)
        missing: list[tuple[int, dict[str, Any]]] = []

        for index, (owner_id, other, existing) in enumerate(directions):
            if existing is None:
                missing.append((index, self._build_contact(owner_id, other, connected_at)))
                continue
            response = execute_write(
                self.client.table("contacts")
                .update(ProfileService.contact_snapshot(other))
                .eq("id", existing["id"])
            )
            contacts[index] = response.data[0] if response.data else None

        if missing:
            response = execute_write(
                self.client.table("contacts").insert([row for _, row in missing])
            )
            for (index, _), created in zip(missing, response.data or []):
                contacts[index] = created

        if not all(contacts):
            logger.error("Contact fan-out for request %s left a direction without a row", request_id)
            raise ConflictError("Could not create contacts for this connection")

        return contacts

    def _revert_claim(self, request_id: UUID) -> None:
        """Put a claimed request back to pending.

        Called while another error is propagating, so a failure here is only
        logged and the caller re-raises the original error.
        """
        try:
            execute_write(
                self.client.table("connection_requests")
                .update({"status": PENDING, "responded_at": None})
                .eq("id", str(request_id))
                .eq("status", ACCEPTED)
            )
        except Exception:
            logger.exception("Could not revert request %s to pending; it is accepted without contacts", request_id)

    @staticmethod
    def _build_contact(owner_id: UUID, other: dict[str, Any], connected_at: str) -> dict[str, Any]:
        return {
            "user_id": str(owner_id),
            "contact_user_id": str(other["user_id"]),
            **ProfileService.contact_snapshot(other),
            "tags": [],
            "connected_at": connected_at,
        }
