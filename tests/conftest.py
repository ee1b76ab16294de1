"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest


class _DummyMessage:
    def __init__(self, content: str | None):
        self.content = content
        self.tool_calls = None


class _DummyChoice:
    def __init__(self, message: _DummyMessage):
        self.message = message


class DummyResponse:
    """Minimal stand-in for a LiteLLM completion response."""

    def __init__(self, content: str | None):
        self.choices = [_DummyChoice(_DummyMessage(content))]


class FailingSource:
    """Knowledge source whose every search fails upstream."""

    def __init__(self) -> None:
        self.calls = 0

    def search(self, query, *, filter=None, select=None, top=5):  # noqa: A002
        from ecocoach.errors import UpstreamServiceError

        self.calls += 1
        raise UpstreamServiceError("search unavailable", ConnectionError("refused"))


class BrokenSource:
    """Knowledge source that raises a raw connection error."""

    def search(self, query, *, filter=None, select=None, top=5):  # noqa: A002
        raise ConnectionError("refused")


@pytest.fixture(autouse=True)
def _reset_singletons():
    from ecocoach.coach.config import reset_coach_config
    from ecocoach.config.settings import reset_settings
    from ecocoach.utils.logging import reset_logging

    reset_coach_config()
    reset_settings()
    yield
    reset_coach_config()
    reset_settings()
    reset_logging()


@pytest.fixture
def coach_config():
    """CoachConfig isolated from the environment and any .env file."""
    from ecocoach.coach.config import CoachConfig

    return CoachConfig(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def make_llm(coach_config, monkeypatch) -> Callable:
    """Build a CoachLLM that replays scripted replies.

    Each reply is either a string (returned as message content) or an
    exception instance (raised from the provider call). The returned client
    records the prompts it was sent on ``calls``.
    """

    def _make(*replies: object):
        from ecocoach.coach.llm import CoachLLM

        llm = CoachLLM(config=coach_config)
        queue = list(replies)
        calls: list[list[dict[str, str]]] = []

        def _fake_call_completion(*, messages, max_tokens, temperature):  # noqa: ARG001
            calls.append(messages)
            if not queue:
                raise ConnectionError("no scripted reply left")
            reply = queue.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return DummyResponse(reply)  # type: ignore[arg-type]

        monkeypatch.setattr(llm, "_call_completion", _fake_call_completion)
        llm.calls = calls  # type: ignore[attr-defined]
        return llm

    return _make


@pytest.fixture
def failing_source() -> FailingSource:
    return FailingSource()


@pytest.fixture
def broken_source() -> BrokenSource:
    return BrokenSource()


@pytest.fixture
def sample_answers() -> dict[str, str]:
    """Survey answers touching every category."""
    return {
        "transport_primary_mode": "cycling",
        "commute_distance": "5",
        "flights_per_year": "1",
        "home_energy_source": "coal",
        "heating_cooling_habits": "moderate",
        "diet_type": "vegan",
        "recycling_habits": "rarely",
        "shower_length": "12",
        "water_saving_devices": "yes",
    }
