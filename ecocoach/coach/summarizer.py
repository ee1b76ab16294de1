"""Natural-language profile summaries."""

from __future__ import annotations

import logging

from ecocoach.coach.llm import CoachLLM
from ecocoach.coach.prompts import SUMMARY_SYSTEM_PROMPT, build_summary_prompt
from ecocoach.errors import UnparsableGenerativeOutput, UpstreamServiceError
from ecocoach.profile.models import Profile

logger = logging.getLogger(__name__)


def fallback_summary(profile: Profile) -> str:
    return (
        f"Here's your sustainability profile! Your overall score is "
        f"{profile.overall_score}/100. Let's work together to improve your "
        "environmental impact."
    )


class NarrativeSummarizer:
    """Turns a profile into a short coaching narrative.

    ``summarize`` always returns a non-empty string; backend failures fall
    back to a fixed sentence carrying the overall score.
    """

    def __init__(self, llm: CoachLLM) -> None:
        self.llm = llm

    def summarize(self, profile: Profile) -> str:
        try:
            return self.llm.complete(
                system_prompt=SUMMARY_SYSTEM_PROMPT,
                user_prompt=build_summary_prompt(profile),
                max_tokens=400,
            )
        except (UpstreamServiceError, UnparsableGenerativeOutput) as e:
            logger.warning("Profile summary generation failed for %s: %s", profile.user_id, e)
            return fallback_summary(profile)
