"""LLM adapters."""

from ad_engine.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from ad_engine.adapters.llm.openai import OpenAIProvider
from ad_engine.adapters.llm.stub import StubLLMProvider

__all__ = [
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
    "StubLLMProvider",
]
