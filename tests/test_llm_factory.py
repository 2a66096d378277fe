"""
Tests for completion provider selection and service wiring.

No real provider clients are constructed; SDK classes are patched.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from mailtriage.config import Settings
from mailtriage.core import ConfigurationException, LLMException
from mailtriage.infrastructure.llm import (
    GenerationOptions,
    MockCompletionClient,
    ZAICompletionClient,
    create_completion_client,
)
from mailtriage.relevance.application import LLMScoringService
from mailtriage.relevance.infrastructure import CompletionClientAdapter, build_relevance_service


def _settings(**overrides) -> Settings:
    values = {
        "mock_llm": False,
        "google_ai_key": None,
        "openai_api_key": None,
        "zai_api_key": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_mock_flag_selects_mock_client():
    assert isinstance(create_completion_client(_settings(mock_llm=True)), MockCompletionClient)


@pytest.mark.parametrize("provider", ["gemini", "openai", "zai"])
def test_missing_key_raises_configuration_error(provider):
    with pytest.raises(ConfigurationException):
        create_completion_client(_settings(llm_provider=provider))


def test_scoring_disabled_without_key_or_mock():
    assert _settings().scoring_disabled
    assert not _settings(mock_llm=True).scoring_disabled
    assert not _settings(llm_provider="openai", openai_api_key="sk-test").scoring_disabled
    assert _settings(llm_provider="openai", google_ai_key="only-gemini").scoring_disabled


def test_generation_options_follow_settings():
    options = GenerationOptions.from_settings(_settings(llm_temperature=0.2, llm_max_output_tokens=256))
    assert options == GenerationOptions(temperature=0.2, top_k=1, top_p=1.0, max_output_tokens=256)


def test_invalid_environment_rejected():
    with pytest.raises(ValueError):
        _settings(environment="qa")


def test_mock_completion_parses_as_breakdown():
    adapter = CompletionClientAdapter(MockCompletionClient())
    raw = asyncio.run(adapter.generate("prompt", GenerationOptions()))
    breakdown = LLMScoringService.parse_breakdown(raw)
    assert breakdown.factors == {
        "content_alignment": 0.7,
        "technical_level_match": 0.6,
        "domain_relevance": 0.7,
        "contextual_fit": 0.6,
    }


def test_build_service_disabled_without_credentials(nlp):
    service = build_relevance_service(_settings(), nlp=nlp)
    assert service.disabled


def test_build_service_with_mock_scores(nlp, knowledge_base):
    service = build_relevance_service(_settings(mock_llm=True), nlp=nlp)
    assert not service.disabled

    score = asyncio.run(service.calculate_relevance_score("database tuning", "", knowledge_base))
    assert score == pytest.approx(0.7 * 0.35 + 0.6 * 0.20 + 0.7 * 0.25 + 0.6 * 0.20)


def _zai_client(sdk: MagicMock) -> ZAICompletionClient:
    with patch("mailtriage.infrastructure.llm.ZaiClient", return_value=sdk):
        return ZAICompletionClient("zai-test-key")


def test_zai_empty_content_becomes_empty_text():
    sdk = MagicMock()
    sdk.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=None))]
    )
    result = asyncio.run(_zai_client(sdk).complete("prompt", GenerationOptions()))

    assert result.content == ""
    assert result.completion_tokens == 0


def test_zai_sdk_errors_wrapped_as_llm_exception():
    sdk = MagicMock()
    sdk.chat.completions.create.side_effect = RuntimeError("rate limited")
    with pytest.raises(LLMException):
        asyncio.run(_zai_client(sdk).complete("prompt", GenerationOptions()))
