"""QR handshake: building and validating connect payloads."""

import json
import logging
import time
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from src.api.middleware.error_handler import InvalidPayloadError, SelfConnectError
from src.core.config import get_settings
from src.schemas.connection import QRCodePayload
from src.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


class QRService:
    """Encodes the caller's QR payload and validates scanned ones."""

    def __init__(self, profile_service: ProfileService | None = None) -> None:
        self.settings = get_settings()
        self.profile_service = profile_service or ProfileService()

    def build_payload(self, user_id: UUID) -> tuple[QRCodePayload, str]:
        """Build the payload a user shows in their QR code.

        Returns:
            tuple: The payload and its JSON string for the QR image.
        """
        payload = QRCodePayload(
            kind=self.settings.qr_payload_kind,
            user_id=user_id,
            timestamp=int(time.time() * 1000),
        )
        return payload, payload.model_dump_json(by_alias=True)

    def parse_payload(self, raw: str) -> QRCodePayload:
        """Decode and validate scanned QR contents.

        Raises:
            InvalidPayloadError: If the data is not this app's connect payload.
        """
        try:
            decoded: Any = json.loads(raw)
        except ValueError as e:
            raise InvalidPayloadError("Could not read this QR code") from e

        if not isinstance(decoded, dict):
            raise InvalidPayloadError("Could not read this QR code")

        try:
            payload = QRCodePayload.model_validate(decoded)
        except PydanticValidationError as e:
            raise InvalidPayloadError() from e

        if payload.kind != self.settings.qr_payload_kind:
            raise InvalidPayloadError()

        return payload

    async def resolve_scan(self, raw: str, scanning_user_id: UUID) -> dict[str, Any]:
        """Validate scanned contents and return the profile they point to.

        Args:
            raw: The string read from the QR code.
            scanning_user_id: The user holding the camera.

        Returns:
            dict: The scanned user's profile.

        Raises:
            InvalidPayloadError: Not a connect payload.
            SelfConnectError: The scanner scanned their own code.
            ProfileNotFoundError: No profile exists for the encoded user.
        """
        payload = self.parse_payload(raw)

        if payload.user_id == scanning_user_id:
            raise SelfConnectError()

        profile = await self.profile_service.require_profile(payload.user_id)
        logger.debug("User %s scanned code of %s", scanning_user_id, payload.user_id)
        return profile
