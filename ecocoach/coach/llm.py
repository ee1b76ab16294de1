"""LLM client for coaching operations.

Uses LiteLLM for completions. Provider failures surface as
``UpstreamServiceError`` and blank or schema-invalid output as
``UnparsableGenerativeOutput``; callers own the fallback.
"""

from __future__ import annotations

import logging
import os
import time
import warnings
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ecocoach.coach.config import CoachConfig, get_coach_config
from ecocoach.errors import UnparsableGenerativeOutput, UpstreamServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

warnings.filterwarnings(
    "ignore",
    message=r"(?s)^Pydantic serializer warnings:.*",
    category=UserWarning,
)


# LiteLLM loads `.env` into process environment by default (DEV mode).
# Default to PRODUCTION unless the user explicitly opted into DEV.
os.environ.setdefault("LITELLM_MODE", "PRODUCTION")


class CoachLLM:
    """LLM client for text and structured coaching output."""

    def __init__(self, config: CoachConfig | None = None) -> None:
        self.config = config or get_coach_config()
        self._setup_provider_env()

    def _setup_provider_env(self) -> None:
        """Set up provider-specific environment variables."""
        if self.config.llm_base_url and self.config.llm_provider == "anthropic":
            base_url = self.config.llm_base_url.rstrip("/")
            if base_url.endswith("/v1"):
                base_url = base_url[:-3]
            os.environ["ANTHROPIC_BASE_URL"] = base_url
            if self.config.llm_api_key:
                os.environ["ANTHROPIC_API_KEY"] = self.config.llm_api_key

    def _get_model_name(self) -> str:
        """Return provider-qualified model name for LiteLLM routing."""
        if self.config.llm_provider == "anthropic":
            if "/" in self.config.llm_model:
                return self.config.llm_model
            return f"anthropic/{self.config.llm_model}"

        if self.config.llm_base_url:
            if "/" in self.config.llm_model:
                return self.config.llm_model
            return f"openai/{self.config.llm_model}"

        if self.config.llm_provider == "openai":
            return self.config.llm_model

        return f"{self.config.llm_provider}/{self.config.llm_model}"

    def complete(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float | None = None,
    ) -> str:
        """Return the completion text for a system/user prompt pair.

        Raises:
            UpstreamServiceError: If the provider call fails.
            UnparsableGenerativeOutput: If the provider returns no text.
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        response = self._complete_with_retries(
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        content = self._message_content(response)
        if content is None or not content.strip():
            raise UnparsableGenerativeOutput("LLM returned no content.")
        return content.strip()

    def generate_structured(
        self,
        *,
        prompt: str,
        output_model: type[T],
        system_prompt: str,
        max_tokens: int,
        temperature: float | None = None,
    ) -> T:
        """Generate output and validate it against a Pydantic model.

        Raises:
            UpstreamServiceError: If the provider call fails.
            UnparsableGenerativeOutput: If the output is not valid for the model.
        """
        content = self.complete(
            system_prompt=system_prompt,
            user_prompt=prompt,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        payload = extract_json(content)

        try:
            return output_model.model_validate_json(payload)
        except ValidationError as e:
            raise UnparsableGenerativeOutput(
                f"Failed to parse LLM response - validation error: {e}", e
            ) from e
        except ValueError as e:
            raise UnparsableGenerativeOutput(
                f"Failed to parse LLM response as JSON: {e}", e
            ) from e

    def _complete_with_retries(
        self,
        *,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float | None,
    ):
        last_error: Exception | None = None
        for attempt in range(self.config.llm_max_retries + 1):
            try:
                return self._call_completion(
                    messages=messages,
                    max_tokens=max_tokens,
                    temperature=temperature,
                )
            except Exception as e:
                last_error = e
                if attempt < self.config.llm_max_retries:
                    delay = min(0.5 * (2**attempt), 8.0)
                    logger.warning(
                        "LLM call failed (attempt %s), retrying in %.1fs: %s",
                        attempt + 1,
                        delay,
                        e,
                    )
                    time.sleep(delay)
                    continue

        raise UpstreamServiceError(f"LLM call failed: {last_error}", last_error)

    def _call_completion(
        self,
        *,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float | None,
    ):
        from litellm import completion

        kwargs: dict[str, Any] = {
            "model": self._get_model_name(),
            "messages": messages,
            "timeout": self.config.llm_timeout,
            "max_tokens": max_tokens,
            "temperature": (
                self.config.llm_temperature if temperature is None else temperature
            ),
        }

        if self.config.llm_api_key:
            kwargs["api_key"] = self.config.llm_api_key

        if self.config.llm_base_url and self.config.llm_provider != "anthropic":
            kwargs["base_url"] = self.config.llm_base_url

        return completion(**kwargs)

    @staticmethod
    def _message_content(response) -> str | None:
        try:
            message = response.choices[0].message
        except (AttributeError, IndexError, TypeError):
            return None

        content = getattr(message, "content", None)
        if content is None:
            tool_calls = getattr(message, "tool_calls", None) or []
            if tool_calls:
                function = getattr(tool_calls[0], "function", None)
                arguments = getattr(function, "arguments", None)
                if isinstance(arguments, str) and arguments.strip():
                    content = arguments
        return None if content is None else str(content)


def extract_json(content: str) -> str:
    """Pull a JSON object or array out of fenced or chatty LLM text."""
    content = content.strip()

    if content.startswith("```"):
        first_newline = content.find("\n")
        if first_newline != -1:
            content = content[first_newline + 1 :]
        if content.endswith("```"):
            content = content[:-3]
        content = content.strip()

    if content.startswith("{") or content.startswith("["):
        return content

    def extract_balanced(text: str, open_char: str, close_char: str) -> str | None:
        start = text.find(open_char)
        if start == -1:
            return None

        depth = 0
        for idx in range(start, len(text)):
            ch = text[idx]
            if ch == open_char:
                depth += 1
            elif ch == close_char:
                depth -= 1
                if depth == 0:
                    return text[start : idx + 1].strip()
        return None

    # Arrays first: recommendation and resource payloads are lists of objects
    extracted = extract_balanced(content, "[", "]")
    if extracted is not None:
        return extracted

    extracted = extract_balanced(content, "{", "}")
    if extracted is not None:
        return extracted

    return content
