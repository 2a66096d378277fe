"""
Relevance Application DTOs
==========================

Data Transfer Objects for the relevance API layer.

Pydantic models for request/response validation.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from mailtriage.relevance.domain import (
    DetailedScore,
    FormattedKnowledgeBase,
    RelevanceResult,
    TextAnalysis,
)


# ========== Type Aliases for Literals ==========
RelevanceLevelStr = Literal["highly_relevant", "moderately_relevant", "low_relevance"]
ScoringOutcomeStr = Literal[
    "scored", "disabled", "retries_exhausted", "unexpected_error", "no_knowledge_base"
]

SUMMARY_MAX_LENGTH = 500
CONSIDERATIONS_MAX_LENGTH = 10000


# ========== Request DTOs ==========

class QAEntryPayload(BaseModel):
    """One knowledge base question/answer pair."""
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class CoalescedSummaryPayload(BaseModel):
    """Coalesced knowledge base summary sections."""
    summary: str = ""
    capabilities: List[str] = Field(default_factory=list)
    use_cases: List[str] = Field(default_factory=list)
    limitations: List[str] = Field(default_factory=list)
    additional_context: Optional[str] = None


class KnowledgeBasePayload(BaseModel):
    """Recipient knowledge base as stored by the caller."""
    entries: List[QAEntryPayload] = Field(default_factory=list)
    coalesced_summary: Optional[CoalescedSummaryPayload] = None
    industry: str = ""
    use_case: str = ""
    main_goals: List[str] = Field(default_factory=list)

    def to_domain(self) -> FormattedKnowledgeBase:
        """Convert to the domain knowledge base."""
        return FormattedKnowledgeBase.from_records(
            qa_pairs=[e.model_dump() for e in self.entries],
            coalesced_summary=self.coalesced_summary.model_dump() if self.coalesced_summary else None,
            industry=self.industry,
            use_case=self.use_case,
            main_goals=self.main_goals,
        )


class ScoreRequest(BaseModel):
    """Request model for relevance scoring."""
    summary: str = Field(..., min_length=1, description="Request summary or email subject")
    considerations: str = Field(default="", description="Request details or email body")
    knowledge_base: Optional[KnowledgeBasePayload] = Field(
        None,
        description="Recipient knowledge base; without one every request is relevant"
    )

    @field_validator("summary", mode="before")
    @classmethod
    def strip_summary(cls, v):
        """Trim before the length check so whitespace-only summaries are rejected."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("summary")
    @classmethod
    def sanitize_summary(cls, v: str) -> str:
        """Cap the summary."""
        return v[:SUMMARY_MAX_LENGTH]

    @field_validator("considerations")
    @classmethod
    def sanitize_considerations(cls, v: str) -> str:
        """Trim and cap the considerations."""
        return v.strip()[:CONSIDERATIONS_MAX_LENGTH]


class OverlapRequest(BaseModel):
    """Request model for the quick goal-overlap score."""
    text: str = Field(..., description="Request summary and considerations")
    organizational_goals: str = Field(..., description="Recipient's organizational goals")


# ========== Response DTOs ==========

class BreakdownInfo(BaseModel):
    """Four-factor breakdown in API responses."""
    content_alignment: float = Field(..., ge=0.0, le=1.0)
    technical_level_match: float = Field(..., ge=0.0, le=1.0)
    domain_relevance: float = Field(..., ge=0.0, le=1.0)
    contextual_fit: float = Field(..., ge=0.0, le=1.0)
    explanation: str

    @classmethod
    def from_domain(cls, breakdown: DetailedScore) -> "BreakdownInfo":
        return cls(explanation=breakdown.explanation, **breakdown.factors)


class AnalysisInfo(BaseModel):
    """Text analysis in API responses."""
    keywords: List[str]
    entities: List[str]
    concepts: List[str]
    technical_terms: List[str]
    sentiment: float
    complexity: float

    @classmethod
    def from_domain(cls, analysis: TextAnalysis) -> "AnalysisInfo":
        return cls(**analysis.to_dict())


class AnalysisPairInfo(BaseModel):
    """Both analyses of a scoring call."""
    request: AnalysisInfo
    knowledge_base: AnalysisInfo


class ScoreResponse(BaseModel):
    """Response model for relevance scoring."""
    score: float = Field(..., ge=0.0, le=1.0)
    level: RelevanceLevelStr
    outcome: ScoringOutcomeStr


class DetailedScoreResponse(ScoreResponse):
    """Response model for relevance scoring with explanation."""
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    breakdown: Optional[BreakdownInfo] = None
    analysis: Optional[AnalysisPairInfo] = None

    @classmethod
    def from_result(cls, result: RelevanceResult, level: str) -> "DetailedScoreResponse":
        analysis = None
        if result.analysis:
            analysis = AnalysisPairInfo(
                request=AnalysisInfo.from_domain(result.analysis.request),
                knowledge_base=AnalysisInfo.from_domain(result.analysis.knowledge_base),
            )
        return cls(
            score=result.score,
            level=level,
            outcome=result.outcome.value,
            confidence=result.confidence,
            breakdown=BreakdownInfo.from_domain(result.breakdown) if result.breakdown else None,
            analysis=analysis,
        )


class OverlapResponse(BaseModel):
    """Response model for the quick goal-overlap score."""
    score: float = Field(..., ge=0.0, le=1.0)
