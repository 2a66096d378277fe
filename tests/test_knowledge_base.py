"""
Tests for knowledge base formatting.
"""

from __future__ import annotations

from mailtriage.relevance.application import KnowledgeBasePayload
from mailtriage.relevance.domain import (
    FormattedKnowledgeBase,
    KnowledgeBaseEntry,
    KnowledgeBaseSummary,
)


def test_entry_joins_question_and_answer():
    entry = KnowledgeBaseEntry.from_qa("What do you sell?", "Database consulting.")
    assert entry.content == "Q: What do you sell?\nA: Database consulting."


def test_summary_keeps_labels_for_empty_sections():
    summary = KnowledgeBaseSummary.from_parts(
        summary="We tune databases.",
        capabilities=["replication", "caching"],
        use_cases=[],
        limitations=["no mobile apps"],
    )
    assert summary.content == (
        "We tune databases.\n"
        "Capabilities: replication, caching\n"
        "Use Cases: \n"
        "Limitations: no mobile apps"
    )


def test_summary_skips_blank_summary_and_missing_context():
    summary = KnowledgeBaseSummary.from_parts(capabilities=["caching"], additional_context="Remote only.")
    assert summary.content == (
        "Capabilities: caching\n"
        "Use Cases: \n"
        "Limitations: \n"
        "Remote only."
    )


def test_summary_wins_over_entries(knowledge_base):
    text = knowledge_base.analysis_text()
    assert text.startswith("We specialize in database architecture")
    assert "Q:" not in text


def test_entries_truncated_without_summary():
    kb = FormattedKnowledgeBase.from_records(
        qa_pairs=[{"question": f"Question {i}?", "answer": "x" * 200} for i in range(20)]
    )
    assert kb.coalesced_summary is None
    assert len(kb.analysis_text()) == 1500
    assert len(kb.analysis_text(char_limit=300)) == 300
    assert kb.analysis_text().startswith("Q: Question 0?\nA: ")


def test_has_content():
    assert not FormattedKnowledgeBase().has_content
    assert FormattedKnowledgeBase.from_records(
        qa_pairs=[], coalesced_summary={"summary": "We do things."}
    ).has_content


def test_payload_converts_to_domain():
    payload = KnowledgeBasePayload.model_validate({
        "entries": [{"question": "Who?", "answer": "Acme Corp."}],
        "coalesced_summary": {"summary": "Acme builds APIs.", "capabilities": ["api design"]},
        "industry": "software",
        "main_goals": ["grow revenue"],
    })
    kb = payload.to_domain()

    assert kb.entries[0].content == "Q: Who?\nA: Acme Corp."
    assert kb.coalesced_summary.content == (
        "Acme builds APIs.\nCapabilities: api design\nUse Cases: \nLimitations: "
    )
    assert kb.industry == "software"
    assert kb.use_case == ""
    assert kb.main_goals == ["grow revenue"]
