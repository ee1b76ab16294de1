"""Survey answer and document loading from YAML or JSON files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml


def _read_payload(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    raw = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()

    if suffix == ".json":
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON file: {path}") from e

    if suffix not in {".yaml", ".yml"}:
        # Try JSON first if it looks like JSON, otherwise fall back to YAML.
        stripped = raw.lstrip()
        if stripped.startswith("{") or stripped.startswith("["):
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                pass

    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML file: {path}") from e


def load_answers(path: Path | str) -> dict[str, Any]:
    """Load survey answers (question key -> answer) from YAML or JSON."""
    answers_path = Path(path)
    data = _read_payload(answers_path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Answers must be a mapping/dict: {answers_path}")
    return {str(key): value for key, value in data.items()}


def load_documents(path: Path | str) -> list[dict[str, Any]]:
    """Load knowledge documents (a list of mappings) from YAML or JSON."""
    documents_path = Path(path)
    data = _read_payload(documents_path)
    if data is None:
        return []
    if isinstance(data, dict) and isinstance(data.get("documents"), list):
        data = data["documents"]
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError(f"Documents must be a list of mappings: {documents_path}")
    return data
