"""Deterministic sustainability scoring rules.

Each category owns a fixed set of survey questions. The score is the rounded
percentage of the category's questions whose answer is sustainable, so an
unanswered question counts as not sustainable. Categories with no answered
questions score a neutral 50.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ecocoach.errors import CategoryNotFoundError

NEUTRAL_SCORE = 50

Predicate = Callable[[Any], bool]

_LEADING_INT_RE = re.compile(r"[-+]?\d+")


def _parse_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT_RE.match(str(value).strip())
    if match is None:
        return None
    return int(match.group(0))


def one_of(*choices: str) -> Predicate:
    """Sustainable when the answer is one of the given choices."""
    allowed = set(choices)

    def _check(value: Any) -> bool:
        return str(value) in allowed

    return _check


def int_below(limit: int) -> Predicate:
    """Sustainable when the answer parses to an integer strictly below limit."""

    def _check(value: Any) -> bool:
        parsed = _parse_int(value)
        return parsed is not None and parsed < limit

    return _check


def int_at_most(limit: int) -> Predicate:
    """Sustainable when the answer parses to an integer <= limit."""

    def _check(value: Any) -> bool:
        parsed = _parse_int(value)
        return parsed is not None and parsed <= limit

    return _check


def int_at_least(limit: int) -> Predicate:
    """Sustainable when the answer parses to an integer >= limit."""

    def _check(value: Any) -> bool:
        parsed = _parse_int(value)
        return parsed is not None and parsed >= limit

    return _check


CATEGORY_QUESTIONS: dict[str, dict[str, Predicate]] = {
    "transportation": {
        "transport_primary_mode": one_of("walking", "cycling", "public_transit"),
        "commute_distance": int_below(10),
        "flights_per_year": int_at_most(2),
    },
    "energy_usage": {
        "home_energy_source": one_of("solar", "wind", "renewable_mix"),
        "heating_cooling_habits": one_of("moderate", "minimal"),
        "appliance_efficiency": one_of("highly_efficient", "energy_star"),
    },
    "food_consumption": {
        "diet_type": one_of("vegetarian", "vegan", "plant_based", "reducetarian"),
        "local_food_percentage": int_at_least(50),
        "food_waste_frequency": one_of("rarely", "never"),
    },
    "waste_management": {
        "recycling_habits": one_of("always", "mostly"),
        "composting": one_of("yes", "sometimes"),
        "single_use_plastics": one_of("avoid", "minimal"),
    },
    "water_usage": {
        "shower_length": int_at_most(5),
        "water_saving_devices": one_of("yes"),
        "lawn_watering_frequency": one_of("never", "drought_only", "rainwater"),
    },
    "purchasing_habits": {
        "new_vs_used": one_of("mostly_used", "balance", "repair_first"),
        "product_lifespan_consideration": one_of("always", "usually"),
        "packaging_consideration": one_of("zero_waste", "minimal_packaging"),
    },
}

SUSTAINABILITY_CATEGORIES: tuple[str, ...] = tuple(CATEGORY_QUESTIONS)


def round_half_up(value: float) -> int:
    """Round a non-negative number to the nearest integer, ties away from zero."""
    return int(math.floor(value + 0.5))


def _is_answered(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


class ScoringRules:
    """Scores survey answers per category against fixed sustainability rules."""

    def __init__(
        self, questions: Mapping[str, Mapping[str, Predicate]] | None = None
    ) -> None:
        self._questions = dict(questions or CATEGORY_QUESTIONS)

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self._questions)

    def questions_for(self, category: str) -> tuple[str, ...]:
        """Return the question keys relevant to a category."""
        if category not in self._questions:
            raise CategoryNotFoundError(category)
        return tuple(self._questions[category])

    def score(self, category: str, answers: Mapping[str, Any]) -> int:
        """Score one category from a mapping of question key to answer.

        Raises:
            CategoryNotFoundError: If the category is not part of the taxonomy.
        """
        if category not in self._questions:
            raise CategoryNotFoundError(category)

        questions = self._questions[category]
        answered = 0
        sustainable = 0
        for question, predicate in questions.items():
            value = answers.get(question)
            if not _is_answered(value):
                continue
            answered += 1
            if predicate(value):
                sustainable += 1

        if answered == 0:
            return NEUTRAL_SCORE
        return round_half_up(100 * sustainable / len(questions))

    def score_all(self, answers: Mapping[str, Any]) -> dict[str, int]:
        """Score every category in the taxonomy."""
        return {category: self.score(category, answers) for category in self._questions}


def compute_overall_score(scores: Iterable[int]) -> int:
    """Arithmetic mean of category scores, rounded; 0 when there are none."""
    values = list(scores)
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))
