"""LLM re-evaluation of a category score after new data arrives."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from ecocoach.coach.llm import CoachLLM
from ecocoach.coach.prompts import REASSESS_SYSTEM_PROMPT, build_reassess_prompt
from ecocoach.errors import UnparsableGenerativeOutput, UpstreamServiceError

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"\d+")


def parse_score_reply(text: str, previous_score: int) -> int:
    """First integer in the reply if it lies in 1..100, else the previous score."""
    match = _INT_RE.search(text or "")
    if match is None:
        return previous_score
    value = int(match.group(0))
    if 1 <= value <= 100:
        return value
    return previous_score


class ScoreReassessor:
    """Asks the LLM for a new category score, keeping the old one on failure."""

    def __init__(self, llm: CoachLLM) -> None:
        self.llm = llm

    def reassess(
        self, category: str, previous_score: int, new_data: Mapping[str, Any]
    ) -> int:
        try:
            reply = self.llm.complete(
                system_prompt=REASSESS_SYSTEM_PROMPT,
                user_prompt=build_reassess_prompt(
                    category=category,
                    previous_score=previous_score,
                    new_data=new_data,
                ),
                max_tokens=100,
                temperature=0.0,
            )
        except (UpstreamServiceError, UnparsableGenerativeOutput) as e:
            logger.warning("Score re-evaluation failed for %s: %s", category, e)
            return previous_score

        score = parse_score_reply(reply, previous_score)
        if score == previous_score:
            logger.debug("Score for %s unchanged at %s (reply=%r)", category, score, reply)
        return score
