"""
Relevance Application Layer
===========================

Application layer for the relevance scoring module.

Contains:
- Services: Scoring orchestration and the LLM breakdown call
- DTOs: Data transfer objects for API serialization
"""

from mailtriage.relevance.application.dto import (
    QAEntryPayload,
    CoalescedSummaryPayload,
    KnowledgeBasePayload,
    ScoreRequest,
    OverlapRequest,
    BreakdownInfo,
    AnalysisInfo,
    AnalysisPairInfo,
    ScoreResponse,
    DetailedScoreResponse,
    OverlapResponse,
)
from mailtriage.relevance.application.services import (
    ITextCompletion,
    ITextAnalyzer,
    LLMScoringService,
    RelevanceScoringService,
)

__all__ = [
    # DTOs
    "QAEntryPayload",
    "CoalescedSummaryPayload",
    "KnowledgeBasePayload",
    "ScoreRequest",
    "OverlapRequest",
    "BreakdownInfo",
    "AnalysisInfo",
    "AnalysisPairInfo",
    "ScoreResponse",
    "DetailedScoreResponse",
    "OverlapResponse",
    # Services
    "LLMScoringService",
    "RelevanceScoringService",
    # Collaborator Interfaces
    "ITextCompletion",
    "ITextAnalyzer",
]
