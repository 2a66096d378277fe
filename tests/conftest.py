"""
Pytest fixtures for relevance scoring tests.

Uses a blank English spaCy pipeline with an entity ruler, so no model
download is needed, and a stub completion that replays canned responses.
"""

from __future__ import annotations

import pytest
import spacy

from mailtriage.relevance.application import LLMScoringService, RelevanceScoringService
from mailtriage.relevance.domain import FormattedKnowledgeBase
from mailtriage.relevance.infrastructure import TextAnalyzer

from stubs import SCENARIO_KB_SUMMARY, StubCompletion


@pytest.fixture(scope="session")
def nlp():
    """Blank English pipeline with deterministic entity patterns."""
    pipeline = spacy.blank("en")
    ruler = pipeline.add_pipe("entity_ruler")
    ruler.add_patterns([
        {"label": "ORG", "pattern": "Acme Corp"},
        {"label": "GPE", "pattern": "Seattle"},
        {"label": "PERSON", "pattern": "Dana Smith"},
    ])
    return pipeline


@pytest.fixture
def analyzer(nlp):
    return TextAnalyzer(nlp)


@pytest.fixture
def knowledge_base():
    return FormattedKnowledgeBase.from_records(
        qa_pairs=[{"question": "What do you do?", "answer": "Database consulting."}],
        coalesced_summary={"summary": SCENARIO_KB_SUMMARY},
        industry="e-commerce",
        use_case="performance consulting",
        main_goals=["win database projects"],
    )


@pytest.fixture
def make_service(analyzer):
    """Factory: relevance service scoring through a StubCompletion."""

    def _make(completion: StubCompletion, max_attempts: int = 3) -> RelevanceScoringService:
        scorer = LLMScoringService(completion, max_attempts=max_attempts)
        return RelevanceScoringService(analyzer, scorer)

    return _make
