"""AI-generated relationship summaries and follow-up messages."""

import logging
from typing import Any
from uuid import UUID

from openai import OpenAIError

from src.api.middleware.error_handler import TextGenerationError
from src.core.config import get_settings
from src.core.openai import get_openai_client
from src.schemas.ai import FollowUpRequest
from src.services.ai_prompts import (
    DEFAULT_FOLLOW_UP_CONTEXT,
    FOLLOW_UP_INSTRUCTIONS_TEMPLATE,
    FOLLOW_UP_SYSTEM_PROMPT_TEMPLATE,
    FOLLOW_UP_USER_PROMPT_TEMPLATE,
    MOCK_FOLLOW_UP,
    MOCK_SUMMARY,
    PURPOSE_DESCRIPTIONS,
    SUMMARY_SYSTEM_PROMPT,
    SUMMARY_USER_PROMPT_TEMPLATE,
)
from src.services.contact_service import ContactService
from src.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


def describe_person(person: dict[str, Any]) -> str:
    """One-line description of a profile or contact snapshot for prompts."""
    name = person.get("display_name") or "Unknown"
    job_title = person.get("job_title")
    company = person.get("company")

    if job_title and company:
        description = f"{name} ({job_title} at {company})"
    elif job_title or company:
        description = f"{name} ({job_title or company})"
    else:
        description = name

    bio = person.get("bio")
    if bio:
        description += f". Bio: {bio}"
    return description


class AIService:
    """Generates text about connections with the configured chat model.

    Each call goes to the endpoint once; results are not cached.
    """

    def __init__(
        self,
        profile_service: ProfileService | None = None,
        contact_service: ContactService | None = None,
    ) -> None:
        self.settings = get_settings()
        self.profile_service = profile_service or ProfileService()
        self.contact_service = contact_service or ContactService()

    def _generate(self, operation: str, system_prompt: str, user_prompt: str) -> str:
        try:
            response = get_openai_client().complete(
                operation,
                model=self.settings.openai_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.settings.openai_temperature,
                max_tokens=self.settings.openai_max_tokens,
            )
        except OpenAIError as e:
            raise TextGenerationError() from e

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            raise TextGenerationError()
        return content

    async def generate_connection_summary(
        self,
        person_a: dict[str, Any],
        person_b: dict[str, Any],
    ) -> str:
        """Summarize why two people matter to each other professionally.

        Args:
            person_a: The owner's profile.
            person_b: The other party's profile or contact snapshot.

        Returns:
            str: A two-sentence summary.
        """
        if self.settings.mock_openai:
            logger.info("Mock mode enabled - returning mock summary")
            role = " at ".join(p for p in (person_b.get("job_title"), person_b.get("company")) if p)
            return MOCK_SUMMARY.format(
                name=person_b.get("display_name") or "This contact",
                role=role or "a professional",
            )

        return self._generate(
            "summary",
            SUMMARY_SYSTEM_PROMPT,
            SUMMARY_USER_PROMPT_TEMPLATE.format(
                person_a=describe_person(person_a),
                person_b=describe_person(person_b),
            ),
        )

    async def summarize_contact(self, contact_id: UUID, user_id: UUID) -> dict[str, Any]:
        """Regenerate and store the summary on one of the user's contacts.

        The other party's live profile is used when it still exists, falling
        back to the contact's snapshot otherwise.

        Returns:
            dict: The updated contact.
        """
        contact = await self.contact_service.get_contact(contact_id, user_id)
        owner = await self.profile_service.require_profile(user_id)
        other = await self.profile_service.get_profile(UUID(contact["contact_user_id"])) or contact

        summary = await self.generate_connection_summary(owner, other)
        return await self.contact_service.set_ai_summary(contact_id, summary)

    async def generate_follow_up(
        self,
        contact_id: UUID,
        user_id: UUID,
        options: FollowUpRequest,
    ) -> str:
        """Draft a follow-up message to one of the user's contacts.

        Returns:
            str: The drafted message. It is not stored.
        """
        contact = await self.contact_service.get_contact(contact_id, user_id)
        sender = await self.profile_service.require_profile(user_id)

        if self.settings.mock_openai:
            logger.info("Mock mode enabled - returning mock follow-up")
            first_name = (contact.get("display_name") or "there").split()[0]
            return MOCK_FOLLOW_UP.format(first_name=first_name, sender_name=sender["display_name"])

        tone = options.tone.value
        user_prompt = FOLLOW_UP_USER_PROMPT_TEMPLATE.format(
            tone=tone,
            purpose=PURPOSE_DESCRIPTIONS[options.purpose.value],
            channel=options.channel,
            sender=describe_person({**sender, "bio": None}),
            recipient=describe_person({**contact, "bio": None}),
            context=contact.get("ai_summary") or DEFAULT_FOLLOW_UP_CONTEXT,
        )
        if options.instructions:
            user_prompt += FOLLOW_UP_INSTRUCTIONS_TEMPLATE.format(instructions=options.instructions)

        return self._generate(
            "follow_up",
            FOLLOW_UP_SYSTEM_PROMPT_TEMPLATE.format(tone=tone, channel=options.channel),
            user_prompt,
        )

    async def summarize_new_connection(self, user_a: UUID, user_b: UUID) -> None:
        """Write one shared summary onto both contacts of a new connection.

        Runs after the acceptance response has been sent. Failures are logged
        and leave the contacts without a summary; it can be regenerated later.
        """
        try:
            profile_a = await self.profile_service.require_profile(user_a)
            profile_b = await self.profile_service.require_profile(user_b)
            summary = await self.generate_connection_summary(profile_a, profile_b)
            updated = await self.contact_service.set_pair_summary(user_a, user_b, summary)
            logger.info("Generated AI summary for connection between %s and %s (%d contacts)", user_a, user_b, updated)
        except Exception as e:
            logger.error("Summary generation failed for connection %s <-> %s: %s", user_a, user_b, e)
