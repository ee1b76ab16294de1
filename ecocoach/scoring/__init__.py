"""Deterministic sustainability scoring.

Public API:
    - ScoringRules: Per-category scoring of survey answers
    - compute_overall_score: Mean of category scores
    - SUSTAINABILITY_CATEGORIES: The fixed category taxonomy
    - load_answers: Read survey answers from YAML or JSON
"""

from ecocoach.scoring.answers import load_answers, load_documents
from ecocoach.scoring.rules import (
    CATEGORY_QUESTIONS,
    NEUTRAL_SCORE,
    SUSTAINABILITY_CATEGORIES,
    ScoringRules,
    compute_overall_score,
    round_half_up,
)

__all__ = [
    "load_answers",
    "load_documents",
    "ScoringRules",
    "CATEGORY_QUESTIONS",
    "NEUTRAL_SCORE",
    "SUSTAINABILITY_CATEGORIES",
    "compute_overall_score",
    "round_half_up",
]
