"""
LLM Factory - builds the chat model shared by every session's agent.

Supports:
- OpenAI (GPT)
- Google (Gemini)
- Anthropic (Claude)
"""

import os
from typing import Literal

from langchain_core.language_models import BaseChatModel

from .exceptions import LLMInvalidModelError, LLMProviderError

Provider = Literal["openai", "google", "anthropic"]

MODEL_PROVIDERS: dict[Provider, list[str]] = {
    "openai": [
        "gpt-5-mini",
        "gpt-5",
        "gpt-4.1",
        "gpt-4o",
        "gpt-4o-mini",
    ],
    "google": [
        "gemini-2.5-flash",
        "gemini-2.5-pro",
        "gemini-2.0-flash",
    ],
    "anthropic": [
        "claude-sonnet-4-20250514",
        "claude-3-5-haiku-20241022",
    ],
}

ALL_MODELS: set[str] = {model for models in MODEL_PROVIDERS.values() for model in models}

API_KEY_ENV: dict[Provider, str] = {
    "openai": "OPENAI_API_KEY",
    "google": "GEMINI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

# Sampling extras sent to OpenAI models that accept them (not gpt-5).
OPENAI_SAMPLING_KWARGS = {
    "top_p": 0.9,
    "frequency_penalty": 0.1,
    "presence_penalty": 0.1,
}


def detect_provider(model: str) -> Provider:
    """
    Detect the provider based on model name.

    Raises:
        LLMInvalidModelError: If the model is not recognized
    """
    model_lower = model.lower()
    if model_lower.startswith(("gpt", "o1", "o3", "o4")):
        return "openai"
    if model_lower.startswith("gemini"):
        return "google"
    if model_lower.startswith("claude"):
        return "anthropic"

    for provider, models in MODEL_PROVIDERS.items():
        if model in models:
            return provider

    raise LLMInvalidModelError(model, list(ALL_MODELS))


def is_restricted_sampling_model(model: str) -> bool:
    """gpt-5 models reject temperature overrides and sampling penalties."""
    return model.lower().startswith("gpt-5")


class LLMFactory:
    """Factory for creating chat models across providers."""

    @classmethod
    def create(
        cls,
        model: str,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        max_retries: int = 2,
        timeout: int = 60,
        api_key: str | None = None,
    ) -> BaseChatModel:
        """
        Create a chat model instance for the specified model.

        Raises:
            LLMInvalidModelError: If model is not recognized
            LLMProviderError: If provider initialization fails
        """
        provider = detect_provider(model)
        api_key = api_key or os.getenv(API_KEY_ENV[provider])

        try:
            match provider:
                case "openai":
                    return cls._create_openai(model, temperature, max_tokens, max_retries, timeout, api_key)
                case "google":
                    return cls._create_google(model, temperature, max_tokens, max_retries, timeout, api_key)
                case "anthropic":
                    return cls._create_anthropic(model, temperature, max_tokens, max_retries, timeout, api_key)
        except ImportError as e:
            raise LLMProviderError(
                f"Provider '{provider}' dependencies not installed: {e}",
                provider=provider,
                model=model,
            ) from e
        except Exception as e:
            raise LLMProviderError(
                f"Failed to create LLM for '{model}': {e}",
                provider=provider,
                model=model,
            ) from e
        raise LLMInvalidModelError(model, list(ALL_MODELS))

    @staticmethod
    def _create_openai(
        model: str,
        temperature: float,
        max_tokens: int | None,
        max_retries: int,
        timeout: int,
        api_key: str | None,
    ) -> BaseChatModel:
        from langchain_openai import ChatOpenAI

        if is_restricted_sampling_model(model):
            return ChatOpenAI(
                model=model,
                temperature=1,
                max_tokens=max_tokens,
                max_retries=max_retries,
                timeout=timeout,
                api_key=api_key,
                streaming=False,
            )
        return ChatOpenAI(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            max_retries=max_retries,
            timeout=timeout,
            api_key=api_key,
            streaming=False,
            model_kwargs=dict(OPENAI_SAMPLING_KWARGS),
        )

    @staticmethod
    def _create_google(
        model: str,
        temperature: float,
        max_tokens: int | None,
        max_retries: int,
        timeout: int,
        api_key: str | None,
    ) -> BaseChatModel:
        from langchain_google_genai import ChatGoogleGenerativeAI

        return ChatGoogleGenerativeAI(
            model=model,
            temperature=temperature,
            max_output_tokens=max_tokens,
            max_retries=max_retries,
            timeout=timeout,
            google_api_key=api_key,
        )

    @staticmethod
    def _create_anthropic(
        model: str,
        temperature: float,
        max_tokens: int | None,
        max_retries: int,
        timeout: int,
        api_key: str | None,
    ) -> BaseChatModel:
        from langchain_anthropic import ChatAnthropic

        kwargs = {"max_tokens": max_tokens} if max_tokens else {}
        return ChatAnthropic(
            model=model,
            temperature=temperature,
            max_retries=max_retries,
            timeout=timeout,
            api_key=api_key,
            **kwargs,
        )
