"""Prompt builders for the coaching LLM calls."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from ecocoach.profile.goals import active_goals
from ecocoach.profile.models import Profile

RECOMMENDATION_SYSTEM_PROMPT = (
    "You are a sustainability expert who provides practical, actionable recommendations."
)
RESOURCE_SYSTEM_PROMPT = (
    "You are a sustainability researcher who curates high-quality educational resources."
)
REASSESS_SYSTEM_PROMPT = (
    "You are a sustainability assessment expert. "
    "Be fair but rigorous in evaluating sustainability behaviors."
)
SUMMARY_SYSTEM_PROMPT = (
    "You are a supportive sustainability coach who helps people improve "
    "their environmental impact."
)
CHAT_SYSTEM_PROMPT = (
    "You are a supportive sustainability coach who helps people improve their "
    "environmental impact. Your responses are friendly, practical, and encouraging."
)


def humanize_category(category: str) -> str:
    return category.replace("_", " ")


def build_recommendation_prompt(
    *, category: str, score: int, level: str, count: int
) -> str:
    return "\n".join(
        [
            f'Generate {count} practical sustainability recommendations for the "{category}" category.',
            f"The user's current sustainability score in this area is {score}/100.",
            f"Recommendations should be appropriate for someone at the {level} level.",
            "",
            "For each recommendation, include:",
            "- title: a clear title (1-5 words)",
            "- description: a brief description (1-2 sentences)",
            "- difficulty: easy, medium, or hard",
            "- impact: low, medium, or high",
            "",
            "Output MUST be a JSON array only (no markdown) of objects with keys: "
            "title, description, difficulty, impact, category",
        ]
    )


def build_resource_prompt(*, topic: str, location: str | None, count: int) -> str:
    scope = f"relevant to {location}" if location else "generally applicable"
    return "\n".join(
        [
            f'Generate {count} high-quality sustainability resources about "{topic}" '
            f"that are {scope}.",
            "",
            "For each resource, include:",
            "- title: a descriptive title",
            "- description: a brief description (1-2 sentences)",
            "- resource_type: website, app, book, organization, or tool",
            "- url: a plausible URL",
            "- tags: 3-5 keywords",
            "",
            "Output MUST be a JSON array only (no markdown) of objects with keys: "
            "title, description, resource_type, url, location, tags",
        ]
    )


def build_reassess_prompt(
    *, category: str, previous_score: int, new_data: Mapping[str, Any]
) -> str:
    return "\n".join(
        [
            f"The user has a current sustainability score of {previous_score}/100 "
            f"in the {category} category.",
            "Please analyze this new information and determine if their score should change:",
            "",
            json.dumps(dict(new_data), ensure_ascii=True, default=str),
            "",
            "Based on this information, what should their new score be (1-100)?",
            "Consider how sustainable their reported behaviors are compared to average.",
            "Respond with ONLY a number between 1-100.",
        ]
    )


def _score_lines(profile: Profile) -> list[str]:
    return [
        f"- {humanize_category(name)}: {state.score}/100"
        for name, state in profile.categories.items()
    ]


def build_summary_prompt(profile: Profile) -> str:
    goals = active_goals(profile)
    lines = [
        "Create a friendly, encouraging sustainability profile summary based on this data.",
        "",
        f"Overall score: {profile.overall_score}/100",
        "Category scores:",
        *_score_lines(profile),
    ]
    if goals:
        lines.append("Active goals:")
        lines.extend(
            f"- {goal.description} ({humanize_category(goal.category)}, {goal.progress}% done)"
            for goal in goals
        )
    lines.extend(
        [
            "",
            "Include:",
            "1. A personalized greeting",
            "2. Their overall sustainability score explained in positive terms",
            "3. Their strongest sustainability category",
            "4. Their area with the most potential for improvement",
            "5. One simple tip for improvement",
            "",
            "Keep it concise, positive and motivational.",
        ]
    )
    return "\n".join(lines)


def build_chat_context(profile: Profile | None) -> str:
    if profile is None:
        return "User sustainability profile: Overall score unknown/100."

    context = f"User sustainability profile: Overall score {profile.overall_score}/100."
    for name, state in profile.categories.items():
        context += f" {humanize_category(name)}: {state.score}/100."

    goals = active_goals(profile)
    if goals:
        context += " Current goals: " + ", ".join(goal.description for goal in goals)
    return context


def build_chat_prompt(*, profile: Profile | None, message: str) -> str:
    return "\n".join(
        [
            f"Context about the user: {build_chat_context(profile)}",
            "",
            f'User message: "{message}"',
            "",
            "Respond to this message as a supportive sustainability coach. "
            "Be helpful, encouraging, and practical.",
            "If they're asking about sustainability topics, provide accurate information.",
            "If they're seeking advice, give actionable suggestions tailored to their profile.",
            "If they're reporting progress, be encouraging.",
            "Keep your response concise (3-5 sentences).",
        ]
    )
