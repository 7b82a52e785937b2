"""Tests for the LLM wrapper's retry policy and JSON clean-up."""

import json

import pytest

from egx_advisor.exceptions import LLMUnavailableError
from egx_advisor.llm.client import LLMClient, parse_llm_json


class TestParseLLMJson:
    def test_plain_json(self) -> None:
        assert parse_llm_json('{"a": 1}') == {"a": 1}

    def test_fenced_json(self) -> None:
        assert parse_llm_json('```json\n[{"a": 1}]\n```') == [{"a": 1}]

    def test_invalid_json(self) -> None:
        with pytest.raises(json.JSONDecodeError):
            parse_llm_json("definitely not json")


class TestLLMClient:
    @pytest.mark.asyncio
    async def test_unconfigured_client(self) -> None:
        client = LLMClient(None)

        assert not client.is_configured
        with pytest.raises(LLMUnavailableError):
            await client.complete("hello")

    @pytest.mark.asyncio
    async def test_retries_rate_limits_with_doubling_delay(
        self, stub_chat_model, status_error, recorded_sleeps
    ) -> None:
        model = stub_chat_model(status_error(429), status_error(503), "ok")
        client = LLMClient(model, sleep=recorded_sleeps)

        assert await client.complete("hello") == "ok"
        assert recorded_sleeps.delays == [2.0, 4.0]
        assert len(model.calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_five_attempts(
        self, stub_chat_model, status_error, recorded_sleeps
    ) -> None:
        model = stub_chat_model(*[status_error(429) for _ in range(5)])
        client = LLMClient(model, sleep=recorded_sleeps)

        with pytest.raises(Exception, match="HTTP 429"):
            await client.complete("hello")
        assert recorded_sleeps.delays == [2.0, 4.0, 8.0, 16.0]

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(
        self, stub_chat_model, status_error, recorded_sleeps
    ) -> None:
        model = stub_chat_model(status_error(400), "never reached")
        client = LLMClient(model, sleep=recorded_sleeps)

        with pytest.raises(Exception, match="HTTP 400"):
            await client.complete("hello")
        assert recorded_sleeps.delays == []

    @pytest.mark.asyncio
    async def test_complete_json_flattens_content_blocks(self, stub_chat_model) -> None:
        blocks = [
            {"type": "text", "text": '{"recommendation": '},
            {"type": "text", "text": '"Buy"}'},
        ]
        model = stub_chat_model(blocks)

        assert await LLMClient(model).complete_json("hi") == {"recommendation": "Buy"}

    @pytest.mark.asyncio
    async def test_complete_json_raises_on_garbage(self, stub_chat_model) -> None:
        with pytest.raises(json.JSONDecodeError):
            await LLMClient(stub_chat_model("sorry, no")).complete_json("hi")
