"""Improvement goals and progress check-ins."""

from __future__ import annotations

import logging
import time
from datetime import date

from ecocoach.errors import CategoryNotFoundError, GoalNotFoundError
from ecocoach.profile.models import CheckIn, Goal, GoalStatus, Profile, utc_now
from ecocoach.profile.store import ProfileStore

logger = logging.getLogger(__name__)


def derive_status(current: GoalStatus, progress: int) -> GoalStatus:
    """Status from the latest progress value.

    ``>= 100`` completes the goal, ``1..99`` marks it in progress, and
    anything else leaves the current status alone. A completed goal that
    later reports 1..99 moves back to in progress.
    """
    if progress >= 100:
        return GoalStatus.COMPLETED
    if progress > 0:
        return GoalStatus.IN_PROGRESS
    return current


def _new_goal_id(profile: Profile) -> str:
    """Time-derived id, bumped until unique within the profile."""
    existing = {goal.id for goal in profile.goals}
    candidate = time.time_ns() // 1_000_000
    while str(candidate) in existing:
        candidate += 1
    return str(candidate)


def active_goals(profile: Profile) -> list[Goal]:
    """Goals that are still active or in progress, in creation order."""
    return [goal for goal in profile.goals if goal.is_open]


class GoalTracker:
    """Creates goals and records progress against them."""

    def __init__(self, store: ProfileStore) -> None:
        self.store = store

    def add_goal(
        self,
        user_id: str,
        category: str,
        description: str,
        target_date: date | None = None,
    ) -> Goal:
        """Append a new active goal to the user's profile.

        Raises:
            ProfileNotFoundError: If the user has no profile.
            CategoryNotFoundError: If the category is not on the profile.
        """
        with self.store.edit(user_id) as profile:
            if category not in profile.categories:
                raise CategoryNotFoundError(category)
            goal = Goal(
                id=_new_goal_id(profile),
                category=category,
                description=description.strip(),
                created_at=utc_now(),
                target_date=target_date,
            )
            profile.goals.append(goal)
            logger.info("Added goal %s (%s) for %s", goal.id, category, user_id)
            return goal.model_copy(deep=True)

    def record_progress(
        self,
        user_id: str,
        goal_id: str,
        progress: int,
        notes: str | None = None,
    ) -> Goal:
        """Record a check-in and update the goal's progress and status.

        Progress is clamped to 0..100.

        Raises:
            ProfileNotFoundError: If the user has no profile.
            GoalNotFoundError: If the goal id is not on the profile.
        """
        with self.store.edit(user_id) as profile:
            goal = profile.find_goal(goal_id)
            if goal is None:
                raise GoalNotFoundError(goal_id)

            value = max(0, min(100, int(progress)))
            goal.check_ins.append(
                CheckIn(date=utc_now(), progress_value=value, notes=notes or "")
            )
            goal.progress = value
            goal.status = derive_status(goal.status, value)
            logger.info(
                "Goal %s for %s: progress=%s status=%s",
                goal_id,
                user_id,
                value,
                goal.status.value,
            )
            return goal.model_copy(deep=True)
