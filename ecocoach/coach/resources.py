"""Learning-resource lookup: search first, generate when short."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from pydantic import RootModel, ValidationError

from ecocoach.coach.config import CoachConfig, get_coach_config
from ecocoach.coach.llm import CoachLLM
from ecocoach.coach.prompts import RESOURCE_SYSTEM_PROMPT, build_resource_prompt
from ecocoach.coach.search import KnowledgeSource, SearchFilter
from ecocoach.errors import UnparsableGenerativeOutput, UpstreamServiceError
from ecocoach.profile.models import Resource

logger = logging.getLogger(__name__)

RESOURCE_FIELDS = [
    "id",
    "title",
    "description",
    "resource_type",
    "url",
    "location",
    "tags",
]
MIN_SEARCH_RESOURCES = 3
GENERATED_RESOURCE_COUNT = 3
SEARCH_ERROR_NOTE = "Generated resources due to service error"


class GeneratedResources(RootModel[list[Resource]]):
    """Schema for the JSON array of resources the LLM must return."""


@dataclass
class ResourceSet:
    """Resources found for a topic plus the degraded-service annotation."""

    topic: str
    location: str | None = None
    resources: list[Resource] = field(default_factory=list)
    degraded: bool = False
    note: str | None = None

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "location": self.location,
            "resources": [r.to_dict() for r in self.resources],
            "degraded": self.degraded,
            "note": self.note,
        }


def topic_slug(topic: str) -> str:
    return re.sub(r"\s+", "-", topic.strip().lower())


def placeholder_resource(topic: str, location: str | None = None) -> Resource:
    return Resource(
        title=f"{topic} Resource Guide",
        description=(
            f"A helpful resource about {topic} for sustainability-minded individuals."
        ),
        resource_type="website",
        url=f"https://sustainabilityresource.org/{topic_slug(topic)}",
        location=location,
        tags=["sustainability", topic.lower(), "resources"],
    )


def _tags_from_document(value: object) -> list[str]:
    # Chroma metadata cannot hold lists, so tags are stored comma-separated
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    if isinstance(value, list):
        return [str(tag) for tag in value]
    return []


class ResourceFinder:
    """Find sustainability resources for a topic, optionally near a location."""

    def __init__(
        self,
        knowledge_source: KnowledgeSource,
        llm: CoachLLM | None = None,
        config: CoachConfig | None = None,
    ) -> None:
        self.config = config or get_coach_config()
        self.knowledge_source = knowledge_source
        self.llm = llm or CoachLLM(config=self.config)

    def find(self, topic: str, location: str | None = None) -> ResourceSet:
        result = ResourceSet(topic=topic, location=location)

        found: list[Resource] = []
        search_failed = False
        try:
            found = self._search(topic, location)
        except UpstreamServiceError as e:
            logger.warning("Resource search failed for %r: %s", topic, e)
            search_failed = True
            result.degraded = True
            result.note = SEARCH_ERROR_NOTE

        generated: list[Resource] = []
        if search_failed or len(found) < MIN_SEARCH_RESOURCES:
            try:
                generated = self._generate(topic, location)
            except (UpstreamServiceError, UnparsableGenerativeOutput) as e:
                logger.warning("Resource generation failed for %r: %s", topic, e)
                generated = [placeholder_resource(topic, location)]
                result.degraded = True

        result.resources = (found + generated)[: self.config.resource_cap]
        return result

    def _search(self, topic: str, location: str | None) -> list[Resource]:
        query = f"{topic} {location}" if location else topic
        search_filter = SearchFilter(any_of={"location": [None, "", location]}) if location else None
        try:
            documents = self.knowledge_source.search(
                query,
                filter=search_filter,
                select=RESOURCE_FIELDS,
                top=self.config.resource_cap,
            )
        except UpstreamServiceError:
            raise
        except Exception as e:
            raise UpstreamServiceError(f"Resource search failed: {e}", e) from e

        resources: list[Resource] = []
        for document in documents:
            payload = {key: value for key, value in document.items() if key != "id"}
            payload["tags"] = _tags_from_document(payload.get("tags"))
            try:
                resources.append(Resource.model_validate(payload))
            except ValidationError as e:
                logger.warning("Skipping invalid resource document %s: %s", document.get("id"), e)
        return resources

    def _generate(self, topic: str, location: str | None) -> list[Resource]:
        parsed = self.llm.generate_structured(
            prompt=build_resource_prompt(
                topic=topic, location=location, count=GENERATED_RESOURCE_COUNT
            ),
            output_model=GeneratedResources,
            system_prompt=RESOURCE_SYSTEM_PROMPT,
            max_tokens=800,
        )
        resources = parsed.root[:GENERATED_RESOURCE_COUNT]
        if not resources:
            raise UnparsableGenerativeOutput("LLM returned an empty resource list.")
        if location:
            resources = [r.model_copy(update={"location": location}) for r in resources]
        return resources
