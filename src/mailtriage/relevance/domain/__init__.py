"""
Relevance Domain Layer
======================

Domain layer for the relevance scoring module.

Contains:
- Entities: Knowledge base, text analysis, score breakdown, result and prompt builder
- Value Objects: Similarity and aggregation calculators

This layer is framework-agnostic and contains pure business logic.
"""

from mailtriage.relevance.domain.entities import (
    KnowledgeBaseEntry,
    KnowledgeBaseSummary,
    FormattedKnowledgeBase,
    TextAnalysis,
    AnalysisPair,
    DetailedScore,
    ScoringOutcome,
    RelevanceResult,
    RelevancePromptBuilder,
)
from mailtriage.relevance.domain.value_objects import (
    PreScores,
    SimilarityCalculator,
    ScoreAggregator,
)

__all__ = [
    "KnowledgeBaseEntry",
    "KnowledgeBaseSummary",
    "FormattedKnowledgeBase",
    "TextAnalysis",
    "AnalysisPair",
    "DetailedScore",
    "ScoringOutcome",
    "RelevanceResult",
    "RelevancePromptBuilder",
    "PreScores",
    "SimilarityCalculator",
    "ScoreAggregator",
]
