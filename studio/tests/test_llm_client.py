"""Tests for LLMClient forced-tool generation and text streaming."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from studio.models.generation import CellSuggestions
from studio.services.llm_client import GenerationError, LLMClient

pytestmark = pytest.mark.asyncio(loop_scope="session")


class MockContentBlock:
    """Mock content block from Anthropic API."""

    def __init__(self, block_type: str, **kwargs: Any):
        self.type = block_type
        for key, value in kwargs.items():
            setattr(self, key, value)


class MockMessage:
    def __init__(self, content: list[MockContentBlock], stop_reason: str = "tool_use"):
        self.content = content
        self.stop_reason = stop_reason


class MockStream:
    """Async context manager standing in for messages.stream()."""

    def __init__(self, chunks: list[str], error: Exception | None = None):
        self.chunks = chunks
        self.error = error

    async def __aenter__(self):
        self.text_stream = self._chunks()
        return self

    async def __aexit__(self, *exc: Any) -> bool:
        return False

    async def _chunks(self):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


def _connection_error() -> anthropic.APIConnectionError:
    return anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))


@pytest.fixture
def client() -> LLMClient:
    llm = LLMClient(api_key="test-api-key", model="test-model", max_tokens=1000)
    llm.client = MagicMock()
    llm.client.messages.create = AsyncMock()
    return llm


class TestGenerateObject:
    async def test_validates_tool_input(self, client):
        client.client.messages.create.return_value = MockMessage(
            [
                MockContentBlock("text", text="Here you go"),
                MockContentBlock("tool_use", input={"suggestions": [{"text": "A", "rationale": "B"}]}),
            ]
        )

        result = await client.generate_object("prompt", CellSuggestions, "system")

        assert isinstance(result, CellSuggestions)
        assert result.suggestions[0].text == "A"
        kwargs = client.client.messages.create.await_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["system"] == "system"
        assert kwargs["tool_choice"] == {"type": "tool", "name": "respond"}
        assert kwargs["tools"][0]["input_schema"] == CellSuggestions.model_json_schema()

    async def test_schema_override(self, client):
        client.client.messages.create.return_value = MockMessage(
            [MockContentBlock("tool_use", input={"suggestions": []})]
        )
        schema = {"type": "object", "properties": {"suggestions": {"type": "array"}}}

        await client.generate_object("prompt", CellSuggestions, "system", json_schema=schema)

        assert client.client.messages.create.await_args.kwargs["tools"][0]["input_schema"] is schema

    async def test_missing_tool_block(self, client):
        client.client.messages.create.return_value = MockMessage(
            [MockContentBlock("text", text="I'd rather chat")], stop_reason="end_turn"
        )
        with pytest.raises(GenerationError, match="did not return a structured result"):
            await client.generate_object("prompt", CellSuggestions, "system")

    async def test_invalid_tool_input(self, client):
        client.client.messages.create.return_value = MockMessage(
            [MockContentBlock("tool_use", input={"suggestions": "not a list"})]
        )
        with pytest.raises(GenerationError, match="invalid CellSuggestions"):
            await client.generate_object("prompt", CellSuggestions, "system")

    async def test_api_error(self, client):
        client.client.messages.create.side_effect = _connection_error()
        with pytest.raises(GenerationError) as exc_info:
            await client.generate_object("prompt", CellSuggestions, "system")
        assert exc_info.value.message == "Connection error."
        assert isinstance(exc_info.value.__cause__, anthropic.APIConnectionError)


class TestStreamText:
    async def test_yields_chunks(self, client):
        client.client.messages.stream = MagicMock(return_value=MockStream(["Standard ", "5.MD.1"]))
        chunks = [chunk async for chunk in client.stream_text("prompt", "system")]
        assert chunks == ["Standard ", "5.MD.1"]

    async def test_error_mid_stream(self, client):
        client.client.messages.stream = MagicMock(return_value=MockStream(["partial"], error=_connection_error()))
        chunks = []
        with pytest.raises(GenerationError):
            async for chunk in client.stream_text("prompt", "system"):
                chunks.append(chunk)
        assert chunks == ["partial"]
