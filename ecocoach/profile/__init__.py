"""Sustainability profiles, their in-memory store, and improvement goals.

Public API:
    - ProfileStore: Per-user profiles with serialized mutations
    - GoalTracker: Goal creation and progress check-ins
    - Profile, CategoryState, Goal, Recommendation, Resource: Data models
"""

from ecocoach.profile.goals import GoalTracker, active_goals, derive_status
from ecocoach.profile.models import (
    CategoryState,
    CheckIn,
    DetailedData,
    DetailEntry,
    Goal,
    GoalStatus,
    Profile,
    Recommendation,
    Resource,
)
from ecocoach.profile.store import ProfileStore

__all__ = [
    "ProfileStore",
    "GoalTracker",
    "active_goals",
    "derive_status",
    "Profile",
    "CategoryState",
    "CheckIn",
    "DetailedData",
    "DetailEntry",
    "Goal",
    "GoalStatus",
    "Recommendation",
    "Resource",
]
