"""
LLM Client Infrastructure
==========================

Wrappers for text completion providers (Gemini, OpenAI, Z.AI) behind one
interface.

The relevance engine depends on the abstraction only; which provider answers
is decided once at startup by ``create_completion_client``.
"""

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import google.generativeai as genai
from openai import AsyncOpenAI
from zai import ZaiClient

from mailtriage.config import Settings
from mailtriage.core import LLMException, ConfigurationException


@dataclass(frozen=True)
class GenerationOptions:
    """Sampling parameters for a single completion request."""
    temperature: float = 0.0
    top_k: int = 1
    top_p: float = 1.0
    max_output_tokens: int = 1024
    candidate_count: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationOptions":
        return cls(
            temperature=settings.llm_temperature,
            top_k=settings.llm_top_k,
            top_p=settings.llm_top_p,
            max_output_tokens=settings.llm_max_output_tokens,
        )


class CompletionResult:
    """Result of a text completion."""

    def __init__(
        self,
        content: str,
        model: str,
        prompt_tokens: int,
        completion_tokens: int,
        latency_ms: int
    ):
        self.content = content
        self.model = model
        self.prompt_tokens = prompt_tokens
        self.completion_tokens = completion_tokens
        self.total_tokens = prompt_tokens + completion_tokens
        self.latency_ms = latency_ms


class ITextCompletionClient(ABC):
    """
    Interface for text completion providers.

    Only the single operation the relevance engine needs is defined.
    """

    @abstractmethod
    async def complete(self, prompt: str, options: GenerationOptions) -> CompletionResult:
        """Generate one completion for a prompt."""


class GeminiCompletionClient(ITextCompletionClient):
    """
    Google Generative AI (Gemini) client.

    Supports the full sampling set including top_k.
    """

    def __init__(self, api_key: Optional[str], model: str = "gemini-1.5-pro"):
        if not api_key:
            raise ConfigurationException("Google AI key not configured")

        genai.configure(api_key=api_key)
        self._model_name = model
        self._model = genai.GenerativeModel(model)

    async def complete(self, prompt: str, options: GenerationOptions) -> CompletionResult:
        """
        Generate a completion with Gemini.

        Raises:
            LLMException: If the request fails or returns no text
        """
        start_time = time.perf_counter()

        try:
            response = await self._model.generate_content_async(
                prompt,
                generation_config=genai.GenerationConfig(
                    temperature=options.temperature,
                    top_k=options.top_k,
                    top_p=options.top_p,
                    max_output_tokens=options.max_output_tokens,
                    candidate_count=options.candidate_count,
                ),
            )
            content = response.text
        except Exception as e:
            raise LLMException(f"Gemini completion failed: {str(e)}")

        usage = getattr(response, "usage_metadata", None)
        return CompletionResult(
            content=content,
            model=self._model_name,
            prompt_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            completion_tokens=getattr(usage, "candidates_token_count", 0) or 0,
            latency_ms=int((time.perf_counter() - start_time) * 1000),
        )


class OpenAICompletionClient(ITextCompletionClient):
    """
    OpenAI client implementation for GPT models.

    Also serves OpenAI-compatible endpoints (Groq etc.) through ``base_url``.
    The chat API has no top_k parameter; it is ignored.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None
    ):
        if not api_key:
            raise ConfigurationException("OpenAI API key not configured")

        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self._model = model

    async def complete(self, prompt: str, options: GenerationOptions) -> CompletionResult:
        """
        Generate a completion using the chat completions endpoint.

        Raises:
            LLMException: If completion fails
        """
        start_time = time.perf_counter()

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=options.temperature,
                top_p=options.top_p,
                max_tokens=options.max_output_tokens,
                n=options.candidate_count,
            )
        except Exception as e:
            raise LLMException(f"Chat completion failed: {str(e)}")

        usage = response.usage
        return CompletionResult(
            content=response.choices[0].message.content or "",
            model=self._model,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            latency_ms=int((time.perf_counter() - start_time) * 1000),
        )


class ZAICompletionClient(ITextCompletionClient):
    """
    Z.AI SDK client implementation for GLM models.

    The SDK is synchronous; calls block the event loop for their duration.
    """

    def __init__(self, api_key: Optional[str], model: str = "glm-4.7"):
        if not api_key:
            raise ConfigurationException("Z.AI API key not configured")

        self._client = ZaiClient(api_key=api_key)
        self._model = model

    async def complete(self, prompt: str, options: GenerationOptions) -> CompletionResult:
        """
        Generate a completion using GLM.

        Raises:
            LLMException: If completion fails
        """
        start_time = time.perf_counter()

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=options.temperature,
                top_p=options.top_p,
                max_tokens=options.max_output_tokens,
            )
            content = response.choices[0].message.content or ""
        except Exception as e:
            raise LLMException(f"Chat completion failed: {str(e)}")

        # Z.AI doesn't return token usage, so we estimate
        return CompletionResult(
            content=content,
            model=self._model,
            prompt_tokens=len(prompt),
            completion_tokens=len(content),
            latency_ms=int((time.perf_counter() - start_time) * 1000),
        )


class MockCompletionClient(ITextCompletionClient):
    """
    Mock completion client for local development and demos.

    Returns a fixed, valid relevance breakdown without calling external APIs.
    """

    MOCK_BREAKDOWN = {
        "contentAlignment": 0.7,
        "technicalLevelMatch": 0.6,
        "domainRelevance": 0.7,
        "contextualFit": 0.6,
        "explanation": "Mock: moderate overlap between request and knowledge base.",
    }

    async def complete(self, prompt: str, options: GenerationOptions) -> CompletionResult:
        content = f"```json\n{json.dumps(self.MOCK_BREAKDOWN, indent=2)}\n```"
        return CompletionResult(
            content=content,
            model="mock-model",
            prompt_tokens=len(prompt.split()),
            completion_tokens=len(content.split()),
            latency_ms=0,
        )


def create_completion_client(settings: Settings) -> ITextCompletionClient:
    """
    Build the completion client selected by configuration.

    Raises:
        ConfigurationException: If the selected provider has no API key
    """
    if settings.mock_llm:
        return MockCompletionClient()

    if settings.llm_provider == "openai":
        return OpenAICompletionClient(
            settings.openai_api_key,
            model=settings.llm_model,
            base_url=settings.openai_base_url,
        )
    if settings.llm_provider == "zai":
        return ZAICompletionClient(settings.zai_api_key, model=settings.llm_model)
    return GeminiCompletionClient(settings.google_ai_key, model=settings.llm_model)
