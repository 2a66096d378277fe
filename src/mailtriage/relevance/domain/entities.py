"""
Relevance Domain Entities
=========================

Domain entities for the relevance scoring module.

Contains pure Python business objects describing what a recipient knows
(knowledge base), what was extracted from text (analysis), and what the
scoring pipeline produced (breakdown and result).
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ========== Knowledge Base ==========

@dataclass(frozen=True)
class KnowledgeBaseEntry:
    """One atomic fact, pre-joined from a question/answer pair."""
    content: str

    @classmethod
    def from_qa(cls, question: str, answer: str) -> "KnowledgeBaseEntry":
        return cls(content=f"Q: {question}\nA: {answer}")


@dataclass(frozen=True)
class KnowledgeBaseSummary:
    """Coalesced narrative of all knowledge base entries."""
    content: str

    @classmethod
    def from_parts(
        cls,
        summary: str = "",
        capabilities: Iterable[str] = (),
        use_cases: Iterable[str] = (),
        limitations: Iterable[str] = (),
        additional_context: Optional[str] = None
    ) -> "KnowledgeBaseSummary":
        """
        Join the coalesced summary sections one per line.

        Labelled sections are always written, even for an empty list; only a
        blank summary or missing additional context is skipped.
        """
        parts = [
            summary,
            f"Capabilities: {', '.join(capabilities)}",
            f"Use Cases: {', '.join(use_cases)}",
            f"Limitations: {', '.join(limitations)}",
            additional_context or "",
        ]
        return cls(content="\n".join(p for p in parts if p))


@dataclass(frozen=True)
class FormattedKnowledgeBase:
    """
    Everything the recipient knows and cares about.

    Built fresh by the caller for each scoring call; never mutated.
    """
    entries: List[KnowledgeBaseEntry] = field(default_factory=list)
    coalesced_summary: Optional[KnowledgeBaseSummary] = None
    industry: str = ""
    use_case: str = ""
    main_goals: List[str] = field(default_factory=list)

    @classmethod
    def from_records(
        cls,
        qa_pairs: Iterable[Mapping[str, str]],
        coalesced_summary: Optional[Mapping] = None,
        industry: str = "",
        use_case: str = "",
        main_goals: Iterable[str] = ()
    ) -> "FormattedKnowledgeBase":
        """Build from stored question/answer rows and an optional summary row."""
        summary = None
        if coalesced_summary:
            summary = KnowledgeBaseSummary.from_parts(
                summary=coalesced_summary.get("summary") or "",
                capabilities=coalesced_summary.get("capabilities") or (),
                use_cases=coalesced_summary.get("use_cases") or (),
                limitations=coalesced_summary.get("limitations") or (),
                additional_context=coalesced_summary.get("additional_context"),
            )
        return cls(
            entries=[KnowledgeBaseEntry.from_qa(p["question"], p["answer"]) for p in qa_pairs],
            coalesced_summary=summary,
            industry=industry,
            use_case=use_case,
            main_goals=list(main_goals),
        )

    @property
    def has_content(self) -> bool:
        return bool(self.entries) or self.coalesced_summary is not None

    def analysis_text(self, char_limit: int = 1500) -> str:
        """
        Text the analyzer should see for this knowledge base.

        The coalesced summary wins when present; otherwise raw entries are
        joined and truncated to ``char_limit`` characters.
        """
        if self.coalesced_summary and self.coalesced_summary.content:
            return self.coalesced_summary.content
        return "\n".join(e.content for e in self.entries)[:char_limit]


# ========== Analysis ==========

@dataclass(frozen=True)
class TextAnalysis:
    """Features extracted from one block of text."""
    keywords: List[str] = field(default_factory=list)
    entities: List[str] = field(default_factory=list)
    concepts: List[str] = field(default_factory=list)
    technical_terms: List[str] = field(default_factory=list)
    sentiment: float = 0.0
    complexity: float = 0.0

    @classmethod
    def empty(cls) -> "TextAnalysis":
        return cls()

    def to_dict(self) -> dict:
        return {
            "keywords": list(self.keywords),
            "entities": list(self.entities),
            "concepts": list(self.concepts),
            "technical_terms": list(self.technical_terms),
            "sentiment": self.sentiment,
            "complexity": self.complexity,
        }


@dataclass(frozen=True)
class AnalysisPair:
    """Analyses of both sides of one scoring call."""
    request: TextAnalysis
    knowledge_base: TextAnalysis


# ========== Scoring ==========

class DetailedScore(BaseModel):
    """
    Four-factor relevance breakdown returned by the model.

    Validated strictly: strings, booleans, non-finite or out-of-range
    numbers are rejected rather than coerced.
    """
    model_config = ConfigDict(strict=True, frozen=True, populate_by_name=True, extra="ignore")

    content_alignment: float = Field(alias="contentAlignment", ge=0.0, le=1.0, allow_inf_nan=False)
    technical_level_match: float = Field(alias="technicalLevelMatch", ge=0.0, le=1.0, allow_inf_nan=False)
    domain_relevance: float = Field(alias="domainRelevance", ge=0.0, le=1.0, allow_inf_nan=False)
    contextual_fit: float = Field(alias="contextualFit", ge=0.0, le=1.0, allow_inf_nan=False)
    explanation: str = Field(min_length=1)

    @field_validator("explanation")
    @classmethod
    def explanation_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("explanation must not be blank")
        return v

    @property
    def factors(self) -> dict:
        return {
            "content_alignment": self.content_alignment,
            "technical_level_match": self.technical_level_match,
            "domain_relevance": self.domain_relevance,
            "contextual_fit": self.contextual_fit,
        }


class ScoringOutcome(str, Enum):
    """How a relevance score was arrived at."""
    SCORED = "scored"
    DISABLED = "disabled"
    RETRIES_EXHAUSTED = "retries_exhausted"
    UNEXPECTED_ERROR = "unexpected_error"
    NO_KNOWLEDGE_BASE = "no_knowledge_base"


@dataclass
class RelevanceResult:
    """
    Outcome of one relevance scoring call.

    ``breakdown``, ``confidence`` and ``analysis`` are only present when
    ``outcome`` is SCORED.
    """
    score: float
    outcome: ScoringOutcome
    breakdown: Optional[DetailedScore] = None
    confidence: Optional[float] = None
    analysis: Optional[AnalysisPair] = None

    def __post_init__(self):
        """Validate relevance result."""
        if not (math.isfinite(self.score) and 0.0 <= self.score <= 1.0):
            raise ValueError("Relevance score must be between 0 and 1")

    @property
    def is_fallback(self) -> bool:
        return self.outcome in (
            ScoringOutcome.DISABLED,
            ScoringOutcome.RETRIES_EXHAUSTED,
            ScoringOutcome.UNEXPECTED_ERROR,
        )


class RelevancePromptBuilder:
    """
    Builds the relevance breakdown prompt.

    All prompt text lives here so the scoring service stays free of wording.
    """

    @staticmethod
    def _join(items: Iterable[str]) -> str:
        items = list(items)
        return ", ".join(items) if items else "none"

    @classmethod
    def build_prompt(
        cls,
        summary: str,
        considerations: str,
        knowledge_base: FormattedKnowledgeBase,
        request_analysis: TextAnalysis,
        knowledge_base_analysis: TextAnalysis,
        content_alignment: float,
        technical_match: float
    ) -> str:
        """Build the scoring prompt from both analyses and the pre-scores."""
        return f"""Task: Score how relevant an inbound request is to an agent's knowledge base.

Knowledge Base Analysis:
- Keywords: {cls._join(knowledge_base_analysis.keywords)}
- Concepts: {cls._join(knowledge_base_analysis.concepts)}
- Technical Terms: {cls._join(knowledge_base_analysis.technical_terms)}
- Complexity: {knowledge_base_analysis.complexity:.2f}
- Industry: {knowledge_base.industry or "unspecified"}
- Use Case: {knowledge_base.use_case or "unspecified"}
- Main Goals: {cls._join(knowledge_base.main_goals)}

Request Analysis:
- Summary: {summary}
- Considerations: {considerations}
- Keywords: {cls._join(request_analysis.keywords)}
- Concepts: {cls._join(request_analysis.concepts)}
- Technical Terms: {cls._join(request_analysis.technical_terms)}
- Complexity: {request_analysis.complexity:.2f}

Pre-calculated Metrics (calibration hints, use your own judgment):
- Content Alignment: {content_alignment:.2f}
- Technical Match: {technical_match:.2f}

Score each factor between 0 and 1:
1. contentAlignment: how closely the request's subject matter matches the knowledge base
2. technicalLevelMatch: whether the request's technical depth suits the knowledge base
3. domainRelevance: whether the request falls within the agent's industry and use case
4. contextualFit: whether handling the request serves the agent's main goals

Respond ONLY with a JSON object, no markdown and no extra text:
{{
    "contentAlignment": 0.0,
    "technicalLevelMatch": 0.0,
    "domainRelevance": 0.0,
    "contextualFit": 0.0,
    "explanation": "brief explanation"
}}"""
