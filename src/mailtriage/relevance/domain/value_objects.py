"""
Relevance Value Objects
=======================

Stateless calculators for the relevance domain.

Every function here is pure: the same analyses always give the same
numbers, which keeps the pre-scores and the final aggregate easy to test.
"""

import math
import re
import statistics
from dataclasses import dataclass
from typing import Dict, Iterable

from mailtriage.config import SCORE_WEIGHTS
from mailtriage.relevance.domain.entities import DetailedScore, TextAnalysis

if not math.isclose(sum(SCORE_WEIGHTS.values()), 1.0):
    raise ValueError(f"SCORE_WEIGHTS must sum to 1.0, got {sum(SCORE_WEIGHTS.values())}")

_TOKEN_RE = re.compile(r"\w+")


@dataclass(frozen=True)
class PreScores:
    """Analyzer-derived metrics embedded in the prompt as calibration hints."""
    content_alignment: float
    technical_match: float


class SimilarityCalculator:
    """
    Set-based similarity between analyses.

    Stateless utility class - all pre-score logic in one place.
    """

    @staticmethod
    def set_similarity(a: str, b: str) -> float:
        """
        Jaccard similarity of the lower-cased token sets of two strings.

        Two empty sets carry no signal and score 0.
        """
        tokens_a = set(_TOKEN_RE.findall(a.lower()))
        tokens_b = set(_TOKEN_RE.findall(b.lower()))
        union = tokens_a | tokens_b
        if not union:
            return 0.0
        return len(tokens_a & tokens_b) / len(union)

    @classmethod
    def _joined_similarity(cls, a: Iterable[str], b: Iterable[str]) -> float:
        return cls.set_similarity(" ".join(a), " ".join(b))

    @classmethod
    def content_alignment(cls, request: TextAnalysis, knowledge_base: TextAnalysis) -> float:
        keyword_sim = cls._joined_similarity(request.keywords, knowledge_base.keywords)
        concept_sim = cls._joined_similarity(request.concepts, knowledge_base.concepts)
        entity_sim = cls._joined_similarity(request.entities, knowledge_base.entities)
        return 0.4 * keyword_sim + 0.4 * concept_sim + 0.2 * entity_sim

    @classmethod
    def technical_match(cls, request: TextAnalysis, knowledge_base: TextAnalysis) -> float:
        term_sim = cls._joined_similarity(request.technical_terms, knowledge_base.technical_terms)
        complexity_match = 1.0 - abs(request.complexity - knowledge_base.complexity)
        return 0.6 * term_sim + 0.4 * complexity_match

    @classmethod
    def pre_scores(cls, request: TextAnalysis, knowledge_base: TextAnalysis) -> PreScores:
        return PreScores(
            content_alignment=cls.content_alignment(request, knowledge_base),
            technical_match=cls.technical_match(request, knowledge_base),
        )

    @staticmethod
    def word_overlap(request: str, goals: str) -> float:
        """
        Quick overlap score between a request and organizational goals.

        Shared whitespace tokens over the size of the larger token set.
        """
        request_words = set(request.lower().split())
        goal_words = set(goals.lower().split())
        largest = max(len(request_words), len(goal_words))
        if largest == 0:
            return 0.0
        common = request_words & goal_words
        return min(1.0, max(0.0, len(common) / largest))


class ScoreAggregator:
    """Reduces a validated breakdown to a score and a confidence."""

    WEIGHTS: Dict[str, float] = SCORE_WEIGHTS

    @classmethod
    def final_score(cls, breakdown: DetailedScore) -> float:
        factors = breakdown.factors
        score = sum(factors[name] * weight for name, weight in cls.WEIGHTS.items())
        # Float rounding must not leak outside [0, 1]
        return min(1.0, max(0.0, score))

    @staticmethod
    def confidence(breakdown: DetailedScore) -> float:
        """
        1.0 when all factors agree, degrading with their spread.

        Floored at 0.5.
        """
        spread = statistics.pstdev(breakdown.factors.values())
        return 1.0 - min(2.0 * spread, 0.5)
