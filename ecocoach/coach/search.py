"""Knowledge source contract and the Chroma-backed implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from ecocoach.errors import UpstreamServiceError

logger = logging.getLogger(__name__)


@dataclass
class SearchFilter:
    """Structured document filter.

    Attributes:
        equals: field -> value that must match exactly.
        ranges: field -> (low, high), both bounds inclusive.
        any_of: field -> allowed values. A missing field matches None.
    """

    equals: dict[str, Any] = field(default_factory=dict)
    ranges: dict[str, tuple[float, float]] = field(default_factory=dict)
    any_of: dict[str, list[Any]] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.equals or self.ranges or self.any_of)

    def matches(self, document: dict[str, Any]) -> bool:
        """Evaluate the filter against a plain document."""
        for key, expected in self.equals.items():
            if document.get(key) != expected:
                return False
        for key, (low, high) in self.ranges.items():
            value = document.get(key)
            if not isinstance(value, (int, float)) or not (low <= value <= high):
                return False
        for key, allowed in self.any_of.items():
            if document.get(key) not in allowed:
                return False
        return True


class KnowledgeSource(Protocol):
    """Searchable document store queried before generating content."""

    def search(
        self,
        query: str,
        *,
        filter: SearchFilter | None = None,
        select: list[str] | None = None,
        top: int = 5,
    ) -> list[dict[str, Any]]:
        """Return at most ``top`` documents; raise UpstreamServiceError on failure."""
        ...


def build_where_clause(search_filter: SearchFilter | None) -> dict[str, Any] | None:
    """Translate a SearchFilter into a Chroma ``where`` clause."""
    if search_filter is None or search_filter.is_empty():
        return None

    conditions: list[dict[str, Any]] = []
    for key, value in search_filter.equals.items():
        conditions.append({key: {"$eq": value}})
    for key, (low, high) in search_filter.ranges.items():
        conditions.append({key: {"$gte": low}})
        conditions.append({key: {"$lte": high}})
    for key, allowed in search_filter.any_of.items():
        # Chroma metadata cannot hold None; see metadata_defaults
        conditions.append({key: {"$in": [v for v in allowed if v is not None]}})

    if len(conditions) == 1:
        return conditions[0]
    return {"$and": conditions}


def _first_row(result: dict[str, Any], key: str) -> list[Any]:
    rows = result.get(key) or []
    if not rows:
        return []
    return list(rows[0] or [])


class ChromaKnowledgeSource:
    """KnowledgeSource over a Chroma collection.

    Document fields are stored as metadata; the document text is used as the
    description when the metadata has none. ``metadata_defaults`` fills fields
    a document leaves missing or None, so filters can still match them.
    """

    def __init__(
        self,
        *,
        path: Path | str | None = None,
        collection_name: str = "sustainability_recommendations",
        collection: Any | None = None,
        metadata_defaults: dict[str, Any] | None = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.collection_name = collection_name
        self.metadata_defaults = dict(metadata_defaults or {})
        self._collection = collection

    def _get_collection(self):
        if self._collection is None:
            import chromadb

            if self.path is not None:
                client = chromadb.PersistentClient(path=str(self.path))
            else:
                client = chromadb.EphemeralClient()
            self._collection = client.get_or_create_collection(self.collection_name)
        return self._collection

    def add_documents(self, documents: list[dict[str, Any]]) -> None:
        """Upsert documents; each needs an ``id`` and a ``description`` or ``title``."""
        if not documents:
            return
        ids = [str(doc["id"]) for doc in documents]
        texts = [str(doc.get("description") or doc.get("title") or "") for doc in documents]
        metadatas = []
        for doc in documents:
            metadata = {
                key: value
                for key, value in doc.items()
                if key != "id" and isinstance(value, (str, int, float, bool))
            }
            for key, default in self.metadata_defaults.items():
                if metadata.get(key) is None:
                    metadata[key] = default
            metadatas.append(metadata)
        try:
            self._get_collection().upsert(ids=ids, documents=texts, metadatas=metadatas)
        except Exception as e:
            raise UpstreamServiceError(f"Knowledge source upsert failed: {e}", e) from e

    def search(
        self,
        query: str,
        *,
        filter: SearchFilter | None = None,
        select: list[str] | None = None,
        top: int = 5,
    ) -> list[dict[str, Any]]:
        try:
            result = self._get_collection().query(
                query_texts=[query],
                n_results=top,
                where=build_where_clause(filter),
                include=["metadatas", "documents"],
            )
        except Exception as e:
            raise UpstreamServiceError(f"Knowledge source search failed: {e}", e) from e

        ids = _first_row(result, "ids")
        metadatas = _first_row(result, "metadatas")
        texts = _first_row(result, "documents")

        documents: list[dict[str, Any]] = []
        for idx, doc_id in enumerate(ids):
            metadata = metadatas[idx] if idx < len(metadatas) else None
            document = {"id": doc_id, **(metadata or {})}
            if not document.get("description") and idx < len(texts) and texts[idx]:
                document["description"] = texts[idx]
            if select:
                document = {key: document.get(key) for key in select if key in document}
            documents.append(document)

        logger.debug("Search %r returned %s document(s)", query, len(documents))
        return documents[:top]


class InMemoryKnowledgeSource:
    """KnowledgeSource over a list of documents; filtering only, no ranking."""

    def __init__(self, documents: list[dict[str, Any]] | None = None) -> None:
        self.documents = list(documents or [])

    def search(
        self,
        query: str,
        *,
        filter: SearchFilter | None = None,
        select: list[str] | None = None,
        top: int = 5,
    ) -> list[dict[str, Any]]:
        matches = [
            doc for doc in self.documents if filter is None or filter.matches(doc)
        ]
        if select:
            matches = [{key: doc.get(key) for key in select if key in doc} for doc in matches]
        return matches[:top]
