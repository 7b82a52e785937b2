from enum import StrEnum

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from egx_advisor.config import settings
from egx_advisor.exceptions import LLMUnavailableError


class LLMProvider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class LLMFactory:
    @staticmethod
    def create(
        provider: str | None = None,
        model: str | None = None,
        **kwargs: object,
    ) -> BaseChatModel:
        provider = provider or settings.llm_provider
        model = model or settings.llm_model
        api_key = settings.api_key_for(provider)

        match provider:
            case LLMProvider.OPENAI:
                if not api_key:
                    raise LLMUnavailableError("OpenAI API key is not configured")
                return ChatOpenAI(model=model, api_key=api_key, **kwargs)  # type: ignore[arg-type]

            case LLMProvider.ANTHROPIC:
                if not api_key:
                    raise LLMUnavailableError("Anthropic API key is not configured")
                return ChatAnthropic(
                    model=model, api_key=api_key, **kwargs  # type: ignore[arg-type]
                )

            case _:
                raise LLMUnavailableError(f"Unknown LLM provider: '{provider}'")
