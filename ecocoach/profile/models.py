"""Data models for sustainability profiles."""

from __future__ import annotations

from datetime import UTC, date, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    return datetime.now(UTC)


Difficulty = Literal["easy", "medium", "hard"]
Impact = Literal["low", "medium", "high"]
Level = Literal["beginner", "intermediate", "advanced"]
RecommendationSource = Literal["search", "generated", "fallback"]


class GoalStatus(str, Enum):
    """Lifecycle status of an improvement goal."""

    ACTIVE = "active"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Recommendation(BaseModel):
    """A single actionable sustainability recommendation."""

    title: str = Field(..., min_length=1, description="Short recommendation title")
    description: str = Field(default="", description="One or two sentence summary")
    difficulty: Difficulty = Field(default="easy", description="Effort required")
    impact: Impact = Field(default="medium", description="Environmental impact")
    category: str = Field(..., description="Category the recommendation belongs to")
    source: RecommendationSource = Field(
        default="search", description="Where the recommendation came from"
    )
    level: Level | None = Field(
        default=None, description="Inferred user level for generated items"
    )

    @field_validator("difficulty", "impact", mode="before")
    @classmethod
    def normalize_choice(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> Recommendation:
        """Deserialize from a dictionary."""
        return cls.model_validate(data)


class Resource(BaseModel):
    """A learning resource (site, app, book, organization, tool)."""

    title: str = Field(..., min_length=1)
    description: str = Field(default="")
    resource_type: Literal["website", "app", "book", "organization", "tool"] = Field(
        default="website"
    )
    url: str | None = Field(default=None)
    location: str | None = Field(default=None)
    tags: list[str] = Field(default_factory=list)

    @field_validator("resource_type", mode="before")
    @classmethod
    def normalize_resource_type(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("location", mode="before")
    @classmethod
    def blank_location_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")


class DetailEntry(BaseModel):
    """One versioned value in a category's detailed data."""

    value: Any = None
    version: int = Field(default=1, ge=1)
    updated_at: datetime = Field(default_factory=utc_now)


class DetailedData(BaseModel):
    """Free-form answers merged over time, last write wins per key."""

    entries: dict[str, DetailEntry] = Field(default_factory=dict)

    def merge(self, new_data: dict[str, Any], *, at: datetime | None = None) -> None:
        """Merge new key/value pairs; written keys bump their version."""
        timestamp = at or utc_now()
        for key, value in new_data.items():
            existing = self.entries.get(key)
            version = existing.version + 1 if existing is not None else 1
            self.entries[key] = DetailEntry(
                value=value, version=version, updated_at=timestamp
            )

    def as_dict(self) -> dict[str, Any]:
        """Return the plain key/value view."""
        return {key: entry.value for key, entry in self.entries.items()}

    def version_of(self, key: str) -> int:
        entry = self.entries.get(key)
        return entry.version if entry is not None else 0


class CategoryState(BaseModel):
    """Score and history for one category of a profile."""

    score: int = Field(..., ge=0, le=100)
    assessed_at: datetime = Field(default_factory=utc_now)
    detailed_data: DetailedData = Field(default_factory=DetailedData)
    recommendations: list[Recommendation] = Field(default_factory=list)


class CheckIn(BaseModel):
    """A progress report against a goal."""

    date: datetime = Field(default_factory=utc_now)
    progress_value: int = Field(..., ge=0, le=100)
    notes: str = Field(default="")


class Goal(BaseModel):
    """An improvement goal tracked on a profile."""

    id: str
    category: str
    description: str
    created_at: datetime = Field(default_factory=utc_now)
    target_date: date | None = None
    status: GoalStatus = GoalStatus.ACTIVE
    progress: int = Field(default=0, ge=0, le=100)
    check_ins: list[CheckIn] = Field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.status in (GoalStatus.ACTIVE, GoalStatus.IN_PROGRESS)

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")


class Profile(BaseModel):
    """Sustainability profile for one user."""

    user_id: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=utc_now)
    last_updated: datetime = Field(default_factory=utc_now)
    overall_score: int = Field(default=0, ge=0, le=100)
    survey_answers: dict[str, Any] = Field(default_factory=dict)
    categories: dict[str, CategoryState] = Field(default_factory=dict)
    goals: list[Goal] = Field(default_factory=list)

    def category_scores(self) -> dict[str, int]:
        return {name: state.score for name, state in self.categories.items()}

    def find_goal(self, goal_id: str) -> Goal | None:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        return None

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dictionary with plain detailed data."""
        payload = self.model_dump(mode="json")
        for state in payload["categories"].values():
            entries = state["detailed_data"]["entries"]
            state["detailed_data"] = {key: entry["value"] for key, entry in entries.items()}
        return payload

    @classmethod
    def from_dict(cls, data: dict) -> Profile:
        """Deserialize from a dictionary produced by ``model_dump``."""
        return cls.model_validate(data)
