"""Exceptions shared across the EcoCoach packages."""

from __future__ import annotations


class CoachError(Exception):
    """Base exception for EcoCoach operations."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class CategoryNotFoundError(CoachError):
    """Raised when a category is not part of the taxonomy or the profile."""

    def __init__(self, category: str):
        super().__init__(f"Category not found: {category}")
        self.category = category


class GoalNotFoundError(CoachError):
    """Raised when a goal id is not present on the profile."""

    def __init__(self, goal_id: str):
        super().__init__(f"Goal not found: {goal_id}")
        self.goal_id = goal_id


class ProfileNotFoundError(CoachError):
    """Raised when no profile exists for a user id."""

    def __init__(self, user_id: str):
        super().__init__(f"Profile not found for user: {user_id}")
        self.user_id = user_id


class UpstreamServiceError(CoachError):
    """Raised when the search or generative provider is unreachable or erroring."""


class UnparsableGenerativeOutput(CoachError):
    """Raised when generative output is blank or does not match the expected schema."""
