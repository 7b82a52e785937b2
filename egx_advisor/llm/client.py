"""Thin wrapper over a LangChain chat model.

Adds the retry policy for rate limiting and overload (HTTP 429/503) and the
JSON clean-up every caller needs. A client built without a model reports
itself as unconfigured so services can pick their own fallback.
"""

import asyncio
import json
import re
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage

from egx_advisor.exceptions import LLMUnavailableError

logger = structlog.get_logger()

RETRYABLE_STATUSES = frozenset({429, 503})
MAX_ATTEMPTS = 5
BASE_DELAY_SECONDS = 2.0

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def parse_llm_json(text: str) -> Any:
    """Parse JSON from an LLM reply, stripping markdown code fences if present."""
    cleaned = text.strip()
    match = _FENCE.search(cleaned)
    if match:
        cleaned = match.group(1).strip()
    return json.loads(cleaned)


def _status_of(exc: BaseException) -> int | None:
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


class LLMClient:
    def __init__(
        self,
        llm: BaseChatModel | None,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._llm = llm
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep

    @property
    def is_configured(self) -> bool:
        return self._llm is not None

    async def complete(self, prompt: str) -> str:
        return await self.invoke([HumanMessage(content=prompt)])

    async def invoke(self, messages: list) -> str:
        """Send messages, retrying only on retryable statuses with doubling delays."""
        if self._llm is None:
            raise LLMUnavailableError()

        for attempt in range(self._max_attempts):
            try:
                response = await self._llm.ainvoke(messages)
            except Exception as exc:
                status = _status_of(exc)
                logger.warning(
                    "llm_attempt_failed",
                    attempt=attempt + 1,
                    max_attempts=self._max_attempts,
                    status=status,
                    error=str(exc),
                )
                if status in RETRYABLE_STATUSES and attempt < self._max_attempts - 1:
                    delay = self._base_delay * 2**attempt
                    logger.info("llm_retry_scheduled", delay_seconds=delay)
                    await self._sleep(delay)
                    continue
                raise

            content = response.content
            return content if isinstance(content, str) else _join_content(content)

        raise LLMUnavailableError("LLM failed after all retries")

    async def complete_json(self, prompt: str) -> Any:
        text = await self.complete(prompt)
        try:
            return parse_llm_json(text)
        except json.JSONDecodeError:
            logger.error("llm_json_parse_error", raw_response=text)
            raise


def _join_content(content: list) -> str:
    """Flatten multi-part message content (Anthropic returns blocks) into text."""
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
