"""Freeform coaching replies."""

from __future__ import annotations

import logging

from ecocoach.coach.llm import CoachLLM
from ecocoach.coach.prompts import CHAT_SYSTEM_PROMPT, build_chat_prompt
from ecocoach.errors import UnparsableGenerativeOutput, UpstreamServiceError
from ecocoach.profile.models import Profile

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "I'm here to help with your sustainability journey! Let me know if you'd like "
    "to set a specific goal, learn about sustainable practices, or get personalized "
    "recommendations."
)


class CoachChat:
    """Answers user messages in the context of their profile."""

    def __init__(self, llm: CoachLLM) -> None:
        self.llm = llm

    def respond(self, profile: Profile | None, message: str) -> str:
        if not message.strip():
            return FALLBACK_REPLY
        try:
            return self.llm.complete(
                system_prompt=CHAT_SYSTEM_PROMPT,
                user_prompt=build_chat_prompt(profile=profile, message=message.strip()),
                max_tokens=300,
            )
        except (UpstreamServiceError, UnparsableGenerativeOutput) as e:
            logger.warning("Chat reply generation failed: %s", e)
            return FALLBACK_REPLY
