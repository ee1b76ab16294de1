"""Search-first recommendation resolution with a generative fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field, RootModel, ValidationError, field_validator

from ecocoach.coach.config import CoachConfig, get_coach_config
from ecocoach.coach.llm import CoachLLM
from ecocoach.coach.prompts import (
    RECOMMENDATION_SYSTEM_PROMPT,
    build_recommendation_prompt,
    humanize_category,
)
from ecocoach.coach.search import KnowledgeSource, SearchFilter
from ecocoach.errors import UnparsableGenerativeOutput, UpstreamServiceError
from ecocoach.profile.models import Difficulty, Impact, Level, Recommendation

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ["id", "title", "description", "difficulty", "impact", "category"]
SEARCH_ERROR_NOTE = "Generated recommendations due to service error"
GENERATION_ERROR_NOTE = "Placeholder recommendation due to generation error"


class GeneratedRecommendation(BaseModel):
    """Schema for one recommendation produced by the LLM."""

    title: str = Field(..., min_length=1)
    description: str = ""
    difficulty: Difficulty = "medium"
    impact: Impact = "medium"

    @field_validator("difficulty", "impact", mode="before")
    @classmethod
    def normalize_choice(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v


class GeneratedRecommendations(RootModel[list[GeneratedRecommendation]]):
    """Schema for the JSON array the LLM must return."""


@dataclass
class RecommendationSet:
    """Resolved recommendations plus the degraded-service annotation."""

    category: str
    score: int
    recommendations: list[Recommendation] = field(default_factory=list)
    degraded: bool = False
    note: str | None = None

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "score": self.score,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "degraded": self.degraded,
            "note": self.note,
        }


def difficulty_level(score: int) -> Level:
    """User level inferred from a category score."""
    if score < 30:
        return "beginner"
    if score < 70:
        return "intermediate"
    return "advanced"


def score_window(score: int, half_width: int) -> tuple[int, int]:
    return max(0, score - half_width), min(100, score + half_width)


def placeholder_recommendation(category: str) -> Recommendation:
    """The fixed recommendation used when nothing else is available."""
    return Recommendation(
        title=f"Improve your {category}",
        description=(
            f"A simple way to be more sustainable in your {humanize_category(category)}."
        ),
        difficulty="easy",
        impact="medium",
        category=category,
        source="fallback",
    )


def _dedupe_by_title(items: list[Recommendation]) -> list[Recommendation]:
    seen: set[str] = set()
    unique: list[Recommendation] = []
    for item in items:
        key = item.title.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


class RecommendationResolver:
    """Resolve recommendations for a category and score.

    The knowledge source is queried first; when it returns too few documents
    (or fails) the LLM fills the gap, and a fixed placeholder stands in when
    generation fails too. The result is never empty.
    """

    def __init__(
        self,
        knowledge_source: KnowledgeSource,
        llm: CoachLLM | None = None,
        config: CoachConfig | None = None,
    ) -> None:
        self.config = config or get_coach_config()
        self.knowledge_source = knowledge_source
        self.llm = llm or CoachLLM(config=self.config)

    def resolve(self, category: str, score: int) -> RecommendationSet:
        """Return at most ``recommendation_cap`` recommendations, never zero."""
        result = RecommendationSet(category=category, score=score)

        primary: list[Recommendation] = []
        search_failed = False
        try:
            primary = self._search(category, score)
        except UpstreamServiceError as e:
            logger.warning("Recommendation search failed for %s: %s", category, e)
            search_failed = True
            result.degraded = True
            result.note = SEARCH_ERROR_NOTE

        generated: list[Recommendation] = []
        if search_failed or len(primary) < self.config.min_primary_results:
            try:
                generated = self._generate(category, score)
            except (UpstreamServiceError, UnparsableGenerativeOutput) as e:
                logger.warning("Recommendation generation failed for %s: %s", category, e)
                generated = [placeholder_recommendation(category)]
                result.degraded = True
                result.note = result.note or GENERATION_ERROR_NOTE

        combined = primary + generated
        if self.config.dedupe_titles:
            combined = _dedupe_by_title(combined)
        if not combined:
            combined = [placeholder_recommendation(category)]

        result.recommendations = combined[: self.config.recommendation_cap]
        logger.info(
            "Resolved %s recommendation(s) for %s (search=%s, generated=%s, degraded=%s)",
            len(result.recommendations),
            category,
            len(primary),
            len(generated),
            result.degraded,
        )
        return result

    def _search(self, category: str, score: int) -> list[Recommendation]:
        low, high = score_window(score, self.config.score_window)
        try:
            documents = self.knowledge_source.search(
                category,
                filter=SearchFilter(
                    equals={"category": category},
                    ranges={"target_score": (low, high)},
                ),
                select=SEARCH_FIELDS,
                top=self.config.recommendation_cap,
            )
        except UpstreamServiceError:
            raise
        except Exception as e:
            raise UpstreamServiceError(f"Recommendation search failed: {e}", e) from e

        recommendations: list[Recommendation] = []
        for document in documents:
            recommendation = self._from_document(document, category)
            if recommendation is not None:
                recommendations.append(recommendation)
        return recommendations

    @staticmethod
    def _from_document(document: dict[str, Any], category: str) -> Recommendation | None:
        payload = {key: value for key, value in document.items() if key != "id"}
        payload.setdefault("category", category)
        payload["source"] = "search"
        try:
            return Recommendation.model_validate(payload)
        except ValidationError as e:
            logger.warning("Skipping invalid search document %s: %s", document.get("id"), e)
            return None

    def _generate(self, category: str, score: int) -> list[Recommendation]:
        level = difficulty_level(score)
        parsed = self.llm.generate_structured(
            prompt=build_recommendation_prompt(
                category=category,
                score=score,
                level=level,
                count=self.config.generation_count,
            ),
            output_model=GeneratedRecommendations,
            system_prompt=RECOMMENDATION_SYSTEM_PROMPT,
            max_tokens=800,
        )
        items = parsed.root[: self.config.generation_count]
        if not items:
            raise UnparsableGenerativeOutput("LLM returned an empty recommendation list.")

        return [
            Recommendation(
                title=item.title,
                description=item.description,
                difficulty=item.difficulty,
                impact=item.impact,
                category=category,
                source="generated",
                level=level,
            )
            for item in items
        ]
