"""
Tests for LLMScoringService and RelevanceScoringService.

Async services are driven with asyncio.run; completions are stubbed.
"""

from __future__ import annotations

import asyncio
import json

import pytest

from mailtriage.core import (
    ConfigurationException,
    LLMException,
    ScoreValidationException,
)
from mailtriage.relevance.application import LLMScoringService, RelevanceScoringService
from mailtriage.relevance.domain import ScoringOutcome

from stubs import (
    SCENARIO_CONSIDERATIONS,
    SCENARIO_SUMMARY,
    StubCompletion,
    breakdown_json,
)


def _score(service, knowledge_base, summary=SCENARIO_SUMMARY, considerations=SCENARIO_CONSIDERATIONS):
    return asyncio.run(service.calculate_detailed_relevance(summary, considerations, knowledge_base))


# ========== End-to-end scenarios ==========

def test_relevant_request_scores_weighted_breakdown(make_service, knowledge_base):
    completion = StubCompletion(breakdown_json(0.9, 0.85, 0.9, 0.8, "strong technical and domain match"))
    result = _score(make_service(completion), knowledge_base)

    assert result.outcome == ScoringOutcome.SCORED
    assert result.score == pytest.approx(0.87)
    assert result.breakdown.explanation == "strong technical and domain match"
    assert 0.5 <= result.confidence <= 1.0
    assert completion.calls == 1


def test_irrelevant_request_scores_low(make_service, knowledge_base):
    completion = StubCompletion(breakdown_json(0.05, 0.05, 0.05, 0.05))
    result = _score(
        make_service(completion),
        knowledge_base,
        summary="lunch recommendations near downtown",
        considerations="somewhere quiet with vegetarian options",
    )

    assert result.score == pytest.approx(0.05)
    assert result.confidence == pytest.approx(1.0)
    assert result.analysis.request.technical_terms == []


def test_malformed_responses_recover_on_last_attempt(make_service, knowledge_base):
    completion = StubCompletion(
        "I think this is quite relevant!",
        "Score: high",
        breakdown_json(0.6, 0.6, 0.6, 0.6),
    )
    result = _score(make_service(completion), knowledge_base)

    assert completion.calls == 3
    assert result.outcome == ScoringOutcome.SCORED
    assert result.score == pytest.approx(0.6)


def test_exhausted_retries_fall_back_to_neutral(make_service, knowledge_base):
    completion = StubCompletion("not json at all")
    result = _score(make_service(completion), knowledge_base)

    assert completion.calls == 3
    assert result.score == 0.5
    assert result.outcome == ScoringOutcome.RETRIES_EXHAUSTED
    assert result.breakdown is None
    assert result.confidence is None


def test_max_attempts_is_configurable(make_service, knowledge_base):
    completion = StubCompletion("nope")
    result = _score(make_service(completion, max_attempts=1), knowledge_base)
    assert completion.calls == 1
    assert result.outcome == ScoringOutcome.RETRIES_EXHAUSTED


def test_transport_error_is_not_retried(make_service, knowledge_base):
    completion = StubCompletion(LLMException("connection reset"))
    result = _score(make_service(completion), knowledge_base)

    assert completion.calls == 1
    assert result.score == 0.5
    assert result.outcome == ScoringOutcome.UNEXPECTED_ERROR


def test_disabled_service_returns_neutral_without_calls(analyzer, knowledge_base):
    service = RelevanceScoringService(analyzer, disabled=True)
    result = _score(service, knowledge_base)

    assert service.disabled
    assert result.score == 0.5
    assert result.outcome == ScoringOutcome.DISABLED
    assert asyncio.run(service.calculate_relevance_score("hi", "", knowledge_base)) == 0.5


def test_service_requires_scorer_unless_disabled(analyzer):
    with pytest.raises(ConfigurationException):
        RelevanceScoringService(analyzer)
    with pytest.raises(ConfigurationException):
        LLMScoringService(StubCompletion("{}"), max_attempts=0)


def test_prompt_carries_analysis_and_pre_scores(make_service, knowledge_base):
    completion = StubCompletion(breakdown_json(0.5, 0.5, 0.5, 0.5))
    _score(make_service(completion), knowledge_base)

    prompt = completion.prompts[0]
    assert SCENARIO_SUMMARY in prompt
    assert "Industry: e-commerce" in prompt
    assert "Main Goals: win database projects" in prompt
    assert "Content Alignment:" in prompt
    assert "contextualFit" in prompt


@pytest.mark.parametrize("responses", [
    [breakdown_json(0.0, 0.0, 0.0, 0.0)],
    [breakdown_json(1.0, 1.0, 1.0, 1.0)],
    ["garbage"],
    [LLMException("down")],
])
def test_score_always_in_unit_range(make_service, knowledge_base, responses):
    result = _score(make_service(StubCompletion(*responses)), knowledge_base)
    assert 0.0 <= result.score <= 1.0


# ========== Breakdown parsing ==========

def _valid(**overrides) -> dict:
    data = {
        "contentAlignment": 0.5,
        "technicalLevelMatch": 0.5,
        "domainRelevance": 0.5,
        "contextualFit": 0.5,
        "explanation": "ok",
    }
    data.update(overrides)
    return data


def test_parse_strips_markdown_fences():
    raw = f"```json\n{json.dumps(_valid())}\n```"
    assert LLMScoringService.parse_breakdown(raw).content_alignment == 0.5

    raw = f"```\n{json.dumps(_valid())}\n```"
    assert LLMScoringService.parse_breakdown(raw).contextual_fit == 0.5


def test_parse_keeps_backticks_inside_explanation():
    explanation = "request quotes ```SELECT *``` query"
    assert LLMScoringService.parse_breakdown(json.dumps(_valid(explanation=explanation))).explanation == explanation

    fenced = f"```json\n{json.dumps(_valid(explanation=explanation))}\n```"
    assert LLMScoringService.parse_breakdown(fenced).explanation == explanation


def test_backticks_in_explanation_score_on_first_attempt(make_service, knowledge_base):
    completion = StubCompletion(json.dumps({
        "contentAlignment": 0.9,
        "technicalLevelMatch": 0.9,
        "domainRelevance": 0.9,
        "contextualFit": 0.9,
        "explanation": "request quotes ```SELECT *``` query",
    }))
    result = _score(make_service(completion), knowledge_base)

    assert completion.calls == 1
    assert result.outcome == ScoringOutcome.SCORED
    assert result.score == pytest.approx(0.9)


@pytest.mark.parametrize("raw", [
    f"Here you go:\n```\n{json.dumps(_valid())}\n```",
    f"```json\n{json.dumps(_valid())}",
    f"{json.dumps(_valid())}\nHope this helps!",
])
def test_parse_rejects_surrounding_text(raw):
    with pytest.raises(ScoreValidationException):
        LLMScoringService.parse_breakdown(raw)


def test_parse_accepts_integer_bounds():
    breakdown = LLMScoringService.parse_breakdown(json.dumps(_valid(contentAlignment=1, contextualFit=0)))
    assert breakdown.content_alignment == 1.0
    assert breakdown.contextual_fit == 0.0


def test_parse_rejects_missing_factor():
    data = _valid()
    del data["contextualFit"]
    with pytest.raises(ScoreValidationException) as exc_info:
        LLMScoringService.parse_breakdown(json.dumps(data))
    assert "contextualFit" in exc_info.value.reason


@pytest.mark.parametrize("overrides", [
    {"contentAlignment": 1.5},
    {"domainRelevance": -0.1},
    {"technicalLevelMatch": "0.5"},
    {"contextualFit": True},
    {"contentAlignment": None},
    {"explanation": ""},
    {"explanation": 42},
])
def test_parse_rejects_invalid_values(overrides):
    with pytest.raises(ScoreValidationException):
        LLMScoringService.parse_breakdown(json.dumps(_valid(**overrides)))


def test_parse_rejects_non_finite_numbers():
    raw = json.dumps(_valid()).replace('"contentAlignment": 0.5', '"contentAlignment": NaN')
    with pytest.raises(ScoreValidationException):
        LLMScoringService.parse_breakdown(raw)


@pytest.mark.parametrize("raw", ["", "[0.5, 0.5]", "0.7", "{not json}"])
def test_parse_rejects_non_objects(raw):
    with pytest.raises(ScoreValidationException):
        LLMScoringService.parse_breakdown(raw)
