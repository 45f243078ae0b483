"""LLM prompts for relationship summaries and follow-up messages."""

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert at professional networking and identifying "
    "professional synergies between people."
)

SUMMARY_USER_PROMPT_TEMPLATE = """Summarize who this person is and why they matter professionally based on the meeting context.
Person A: {person_a}
Person B: {person_b}
Keep it to 2 sentences."""

FOLLOW_UP_SYSTEM_PROMPT_TEMPLATE = (
    "You are a helpful assistant drafting a {tone} networking message for {channel}."
)

FOLLOW_UP_USER_PROMPT_TEMPLATE = """Write a {tone} {purpose} message suitable for {channel}. Keep it natural and professional.
From: {sender}
To: {recipient}
Context/Summary: {context}"""

FOLLOW_UP_INSTRUCTIONS_TEMPLATE = "\nAdditional instructions: {instructions}"

# Used when the contact has no summary yet
DEFAULT_FOLLOW_UP_CONTEXT = "Recently connected on Netwify."

PURPOSE_DESCRIPTIONS = {
    "follow_up": "follow-up",
    "thank_you": "thank-you",
    "meeting_request": "meeting request",
    "custom": "networking",
}

MOCK_SUMMARY = (
    "{name} works as {role}. You share professional interests that make "
    "this a connection worth following up on."
)

MOCK_FOLLOW_UP = (
    "Hi {first_name},\n\nIt was great connecting with you. I'd love to stay in "
    "touch and continue our conversation.\n\nBest,\n{sender_name}"
)
