"""In-memory profile store keyed by user id."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from ecocoach.errors import CategoryNotFoundError, ProfileNotFoundError
from ecocoach.profile.models import CategoryState, Profile, Recommendation, utc_now
from ecocoach.scoring.rules import ScoringRules, compute_overall_score

logger = logging.getLogger(__name__)

# (category, previous_score, new_data) -> new score
Rescorer = Callable[[str, int, Mapping[str, Any]], int]


class ProfileStore:
    """Holds one profile per user and serializes mutations per user.

    Profiles handed out by ``create``/``get`` are deep copies; the stored
    profile is only changed through the store's own operations.
    """

    def __init__(
        self,
        rules: ScoringRules | None = None,
        rescorer: Rescorer | None = None,
    ) -> None:
        self.rules = rules or ScoringRules()
        self.rescorer = rescorer
        self._profiles: dict[str, Profile] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, user_id: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[user_id] = lock
            return lock

    def _require(self, user_id: str) -> Profile:
        profile = self._profiles.get(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return profile

    @staticmethod
    def _touch(profile: Profile) -> None:
        profile.overall_score = compute_overall_score(
            state.score for state in profile.categories.values()
        )
        profile.last_updated = utc_now()

    def create(self, user_id: str, initial_answers: Mapping[str, Any]) -> Profile:
        """Create (or replace) a user's profile from initial survey answers."""
        answers = dict(initial_answers)
        now = utc_now()
        categories = {
            category: CategoryState(score=score, assessed_at=now)
            for category, score in self.rules.score_all(answers).items()
        }
        profile = Profile(
            user_id=user_id,
            created_at=now,
            last_updated=now,
            survey_answers=answers,
            categories=categories,
        )
        profile.overall_score = compute_overall_score(profile.category_scores().values())

        with self._lock_for(user_id):
            if user_id in self._profiles:
                logger.info("Replacing existing profile for %s", user_id)
            self._profiles[user_id] = profile
            logger.debug(
                "Created profile for %s (overall=%s)", user_id, profile.overall_score
            )
            return profile.model_copy(deep=True)

    def exists(self, user_id: str) -> bool:
        return user_id in self._profiles

    def get(self, user_id: str) -> Profile:
        """Return a copy of the user's profile.

        Raises:
            ProfileNotFoundError: If the user has no profile.
        """
        with self._lock_for(user_id):
            return self._require(user_id).model_copy(deep=True)

    def update(
        self, user_id: str, category: str, new_data: Mapping[str, Any]
    ) -> CategoryState:
        """Merge new data into a category and recompute its score.

        Raises:
            ProfileNotFoundError: If the user has no profile.
            CategoryNotFoundError: If the category is not on the profile.
        """
        with self._lock_for(user_id):
            profile = self._require(user_id)
            state = profile.categories.get(category)
            if state is None:
                raise CategoryNotFoundError(category)

            now = utc_now()
            state.detailed_data.merge(dict(new_data), at=now)

            if self.rescorer is not None:
                new_score = self.rescorer(category, state.score, dict(new_data))
            else:
                merged = {**profile.survey_answers, **state.detailed_data.as_dict()}
                new_score = self.rules.score(category, merged)

            state.score = max(0, min(100, int(new_score)))
            state.assessed_at = now
            self._touch(profile)
            logger.info(
                "Updated %s for %s: score=%s overall=%s",
                category,
                user_id,
                state.score,
                profile.overall_score,
            )
            return state.model_copy(deep=True)

    def set_recommendations(
        self, user_id: str, category: str, recommendations: list[Recommendation]
    ) -> None:
        """Store the latest recommendations resolved for a category."""
        with self._lock_for(user_id):
            profile = self._require(user_id)
            state = profile.categories.get(category)
            if state is None:
                raise CategoryNotFoundError(category)
            state.recommendations = [r.model_copy() for r in recommendations]
            profile.last_updated = utc_now()

    def overall_score(self, user_id: str) -> int:
        with self._lock_for(user_id):
            return self._require(user_id).overall_score

    @contextmanager
    def edit(self, user_id: str) -> Iterator[Profile]:
        """Yield the live profile under the user's lock.

        The overall score and ``last_updated`` are refreshed when the block
        completes; a block that raises leaves ``last_updated`` untouched.
        """
        with self._lock_for(user_id):
            profile = self._require(user_id)
            yield profile
            self._touch(profile)
