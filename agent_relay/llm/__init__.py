"""
LLM Module - Multi-provider chat model construction.

This module provides:
- LLMFactory: Create chat models for OpenAI, Google and Anthropic
- detect_provider / API_KEY_ENV: provider lookup used by the launcher
"""

from .exceptions import LLMError, LLMInvalidModelError, LLMProviderError
from .factory import API_KEY_ENV, MODEL_PROVIDERS, LLMFactory, detect_provider

__all__ = [
    # Factory
    "LLMFactory",
    "detect_provider",
    "MODEL_PROVIDERS",
    "API_KEY_ENV",
    # Exceptions
    "LLMError",
    "LLMProviderError",
    "LLMInvalidModelError",
]
