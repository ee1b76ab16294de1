"""Coaching services: recommendations, resources, narratives and chat.

Public API:
    - SustainabilityCoach: Service boundary returning CoachResponse objects
    - RecommendationResolver: Search-first recommendations with LLM fallback
    - ResourceFinder: Search-first learning resources with LLM fallback
    - NarrativeSummarizer: Profile summaries with a fixed fallback sentence
    - CoachConfig: Configuration settings
"""

from ecocoach.coach.chat import CoachChat
from ecocoach.coach.config import CoachConfig, get_coach_config, reset_coach_config
from ecocoach.coach.llm import CoachLLM
from ecocoach.coach.reassess import ScoreReassessor
from ecocoach.coach.resolver import RecommendationResolver, RecommendationSet
from ecocoach.coach.resources import ResourceFinder, ResourceSet
from ecocoach.coach.search import (
    ChromaKnowledgeSource,
    InMemoryKnowledgeSource,
    KnowledgeSource,
    SearchFilter,
)
from ecocoach.coach.service import CoachResponse, ErrorInfo, SustainabilityCoach
from ecocoach.coach.summarizer import NarrativeSummarizer

__all__ = [
    "SustainabilityCoach",
    "CoachResponse",
    "ErrorInfo",
    "RecommendationResolver",
    "RecommendationSet",
    "ResourceFinder",
    "ResourceSet",
    "NarrativeSummarizer",
    "ScoreReassessor",
    "CoachChat",
    "CoachLLM",
    "KnowledgeSource",
    "ChromaKnowledgeSource",
    "InMemoryKnowledgeSource",
    "SearchFilter",
    "CoachConfig",
    "get_coach_config",
    "reset_coach_config",
]
