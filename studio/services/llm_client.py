"""
Anthropic client for board generation.

Two call shapes:
  - generate_object: one forced tool call whose input schema is a pydantic
    model; the tool input is validated back into that model.
  - stream_text: plain text streaming.

No automatic retries. Every failure (transport, API status, missing or
malformed tool output) surfaces as GenerationError.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any, TypeVar

import anthropic
from pydantic import BaseModel, ValidationError

from studio.config import settings

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_TOOL_NAME = "respond"


class GenerationError(Exception):
    """A generation call failed. `message` is safe to show to the client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LLMClient:
    """Thin wrapper around anthropic.AsyncAnthropic."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key or settings.ANTHROPIC_API_KEY,
            max_retries=0,
            timeout=timeout or settings.LLM_TIMEOUT_SECONDS,
        )
        self.model = model or settings.GENERATION_MODEL
        self.max_tokens = max_tokens or settings.LLM_MAX_TOKENS

    async def generate_object(
        self,
        prompt: str,
        output_type: type[M],
        system: str,
        json_schema: dict[str, Any] | None = None,
    ) -> M:
        """
        Generate a structured object.

        Args:
            prompt: User prompt
            output_type: Pydantic model the output must satisfy
            system: System prompt
            json_schema: Optional schema override (defaults to the model's own)

        Raises:
            GenerationError: On any API failure or output that does not validate
        """
        tool = {
            "name": _TOOL_NAME,
            "description": "Return the result in the required structure.",
            "input_schema": json_schema or output_type.model_json_schema(),
        }
        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=[{"role": "user", "content": prompt}],
                tools=[tool],
                tool_choice={"type": "tool", "name": _TOOL_NAME},
            )
        except anthropic.APIError as e:
            logger.error("llm: %s call failed: %s", output_type.__name__, e.message)
            raise GenerationError(e.message) from e

        block = next((b for b in message.content if getattr(b, "type", None) == "tool_use"), None)
        if block is None:
            logger.error("llm: %s call returned no tool_use block (stop_reason=%s)", output_type.__name__, message.stop_reason)
            raise GenerationError("The model did not return a structured result.")

        try:
            return output_type.model_validate(block.input)
        except ValidationError as e:
            logger.error("llm: %s output failed validation: %s", output_type.__name__, e)
            raise GenerationError(f"The model returned an invalid {output_type.__name__}.") from e

    async def stream_text(self, prompt: str, system: str) -> AsyncIterator[str]:
        """
        Stream a plain-text completion chunk by chunk.

        Raises:
            GenerationError: If the stream cannot be opened or breaks mid-way
        """
        try:
            async with self.client.messages.stream(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            ) as stream:
                async for text in stream.text_stream:
                    yield text
        except anthropic.APIError as e:
            logger.error("llm: stream failed: %s", e.message)
            raise GenerationError(e.message) from e
