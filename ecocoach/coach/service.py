"""Sustainability coaching service: the boundary callers talk to.

Every public method returns a ``CoachResponse``. Missing profiles, categories
and goals come back as ``type="error"`` responses; provider outages never
surface as failures, only as ``degraded=True`` with a note.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, TypeVar

from ecocoach.coach.chat import CoachChat
from ecocoach.coach.config import CoachConfig, get_coach_config
from ecocoach.coach.llm import CoachLLM
from ecocoach.coach.prompts import humanize_category
from ecocoach.coach.reassess import ScoreReassessor
from ecocoach.coach.resolver import RecommendationResolver
from ecocoach.coach.resources import ResourceFinder
from ecocoach.coach.search import ChromaKnowledgeSource, KnowledgeSource
from ecocoach.coach.summarizer import NarrativeSummarizer
from ecocoach.errors import (
    CategoryNotFoundError,
    CoachError,
    GoalNotFoundError,
    ProfileNotFoundError,
)
from ecocoach.profile.goals import GoalTracker
from ecocoach.profile.models import GoalStatus
from ecocoach.profile.store import ProfileStore
from ecocoach.scoring.rules import ScoringRules

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., "CoachResponse"])

_ERROR_CODES: dict[type[CoachError], str] = {
    CategoryNotFoundError: "category_not_found",
    GoalNotFoundError: "goal_not_found",
    ProfileNotFoundError: "profile_not_found",
}


@dataclass
class ErrorInfo:
    """Structured error returned instead of raising past the service."""

    code: str
    message: str


@dataclass
class CoachResponse:
    """Result of a coaching operation."""

    type: str
    data: dict[str, Any] = field(default_factory=dict)
    message: str | None = None
    degraded: bool = False
    note: str | None = None
    error: ErrorInfo | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type, **self.data}
        if self.message is not None:
            payload["message"] = self.message
        if self.degraded:
            payload["degraded"] = True
        if self.note is not None:
            payload["note"] = self.note
        if self.error is not None:
            payload["error"] = {"code": self.error.code, "message": self.error.message}
        return payload


def error_response(error: CoachError) -> CoachResponse:
    code = _ERROR_CODES.get(type(error), "error")
    return CoachResponse(
        type="error",
        message=str(error),
        error=ErrorInfo(code=code, message=str(error)),
    )


def _structured_errors(method: F) -> F:
    """Convert not-found errors into ``type="error"`` responses."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (CategoryNotFoundError, GoalNotFoundError, ProfileNotFoundError) as e:
            logger.info("%s: %s", method.__name__, e)
            return error_response(e)

    return wrapper  # type: ignore[return-value]


class SustainabilityCoach:
    """Coordinates scoring, profiles, goals, recommendations and narratives."""

    def __init__(
        self,
        config: CoachConfig | None = None,
        *,
        llm: CoachLLM | None = None,
        knowledge_source: KnowledgeSource | None = None,
        resource_source: KnowledgeSource | None = None,
        rules: ScoringRules | None = None,
        store: ProfileStore | None = None,
    ) -> None:
        self.config = config or get_coach_config()
        self.llm = llm or CoachLLM(config=self.config)
        self.rules = rules or ScoringRules()

        if store is None:
            rescorer = None
            if self.config.reassess_with_llm:
                rescorer = ScoreReassessor(self.llm).reassess
            store = ProfileStore(rules=self.rules, rescorer=rescorer)
        self.store = store
        self.goals = GoalTracker(self.store)

        if knowledge_source is None:
            knowledge_source = ChromaKnowledgeSource(
                path=self.config.search_path,
                collection_name=self.config.search_collection,
            )
        if resource_source is None:
            resource_source = ChromaKnowledgeSource(
                path=self.config.search_path,
                collection_name=self.config.resource_collection,
                metadata_defaults={"location": ""},
            )

        self.resolver = RecommendationResolver(knowledge_source, self.llm, self.config)
        self.resources = ResourceFinder(resource_source, self.llm, self.config)
        self.summarizer = NarrativeSummarizer(self.llm)
        self.chat_agent = CoachChat(self.llm)

    def list_categories(self) -> CoachResponse:
        return CoachResponse(
            type="sustainability_categories",
            data={
                "categories": {
                    category: list(self.rules.questions_for(category))
                    for category in self.rules.categories
                }
            },
        )

    def create_profile(
        self, user_id: str, initial_answers: Mapping[str, Any]
    ) -> CoachResponse:
        profile = self.store.create(user_id, initial_answers)
        return CoachResponse(
            type="sustainability_profile_created",
            data={"profile": profile.to_dict()},
            message=(
                "Your sustainability profile has been created. "
                "Would you like to see your initial assessment?"
            ),
        )

    @_structured_errors
    def get_profile(self, user_id: str) -> CoachResponse:
        profile = self.store.get(user_id)
        return CoachResponse(type="sustainability_profile", data={"profile": profile.to_dict()})

    @_structured_errors
    def update_category(
        self, user_id: str, category: str, new_data: Mapping[str, Any]
    ) -> CoachResponse:
        state = self.store.update(user_id, category, new_data)
        overall = self.store.overall_score(user_id)
        return CoachResponse(
            type="category_updated",
            data={
                "category": category,
                "new_score": state.score,
                "overall_score": overall,
            },
            message=(
                f"Your {humanize_category(category)} information has been updated! "
                f"Your new score in this category is {state.score}/100."
            ),
        )

    @_structured_errors
    def get_recommendations(self, user_id: str, category: str) -> CoachResponse:
        profile = self.store.get(user_id)
        state = profile.categories.get(category)
        if state is None:
            raise CategoryNotFoundError(category)

        resolved = self.resolver.resolve(category, state.score)
        self.store.set_recommendations(user_id, category, resolved.recommendations)
        return CoachResponse(
            type="sustainability_recommendations",
            data={
                "category": category,
                "recommendations": [r.to_dict() for r in resolved.recommendations],
                "current_score": state.score,
            },
            degraded=resolved.degraded,
            note=resolved.note,
        )

    def get_resources(self, topic: str, location: str | None = None) -> CoachResponse:
        found = self.resources.find(topic, location)
        return CoachResponse(
            type="sustainability_resources",
            data={
                "topic": topic,
                "location": location,
                "resources": [r.to_dict() for r in found.resources],
            },
            degraded=found.degraded,
            note=found.note,
        )

    @_structured_errors
    def add_goal(
        self,
        user_id: str,
        category: str,
        description: str,
        target_date: date | None = None,
    ) -> CoachResponse:
        goal = self.goals.add_goal(user_id, category, description, target_date)
        return CoachResponse(
            type="goal_created",
            data={"goal": goal.to_dict()},
            message=(
                "Your sustainability goal has been added! "
                "We'll help you track your progress."
            ),
        )

    @_structured_errors
    def update_goal_progress(
        self,
        user_id: str,
        goal_id: str,
        progress: int,
        notes: str | None = None,
    ) -> CoachResponse:
        goal = self.goals.record_progress(user_id, goal_id, progress, notes)
        if goal.status is GoalStatus.COMPLETED:
            message = "Congratulations! You've completed your sustainability goal!"
        else:
            message = f"Goal progress updated to {goal.progress}%. Keep up the good work!"
        return CoachResponse(type="goal_updated", data={"goal": goal.to_dict()}, message=message)

    @_structured_errors
    def get_summary(self, user_id: str) -> CoachResponse:
        profile = self.store.get(user_id)
        return CoachResponse(
            type="sustainability_summary",
            data={
                "summary": self.summarizer.summarize(profile),
                "profile": profile.to_dict(),
            },
        )

    def chat(self, user_id: str, message: str) -> CoachResponse:
        profile = self.store.get(user_id) if self.store.exists(user_id) else None
        return CoachResponse(
            type="message_response",
            data={"response": self.chat_agent.respond(profile, message)},
        )
