"""
Relevance Application Services
==============================

Application services for relevance scoring.

Orchestrates text analysis, the LLM breakdown call and score aggregation.
"""

import json
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from pydantic import ValidationError

from mailtriage.core import (
    ConfigurationException,
    ScoreValidationException,
    ScoringExhaustedException,
)
from mailtriage.infrastructure.llm import GenerationOptions
from mailtriage.relevance.domain import (
    AnalysisPair,
    DetailedScore,
    FormattedKnowledgeBase,
    RelevancePromptBuilder,
    RelevanceResult,
    ScoreAggregator,
    ScoringOutcome,
    SimilarityCalculator,
    TextAnalysis,
)
from mailtriage.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


# ========== Collaborator Interfaces ==========

class ITextCompletion(ABC):
    """Interface for the text completion capability."""

    @abstractmethod
    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Return the raw completion text for a prompt."""


class ITextAnalyzer(ABC):
    """Interface for text feature extraction."""

    @abstractmethod
    def analyze(self, text: str, corpus: Optional[Sequence[str]] = None) -> TextAnalysis:
        """Extract features from text."""


# ========== Application Services ==========

class LLMScoringService:
    """
    Obtains a validated four-factor breakdown from the completion capability.

    Malformed or invalid responses are retried up to ``max_attempts`` calls in
    total. Errors raised by the completion capability itself are not retried.
    """

    def __init__(
        self,
        completion: ITextCompletion,
        options: Optional[GenerationOptions] = None,
        max_attempts: int = 3
    ):
        if max_attempts < 1:
            raise ConfigurationException("max_attempts must be at least 1")
        self._completion = completion
        self._options = options or GenerationOptions()
        self._max_attempts = max_attempts

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def score(self, prompt: str) -> DetailedScore:
        """
        Request a breakdown, retrying on invalid output.

        Raises:
            ScoringExhaustedException: If every attempt was invalid
        """
        last_error: Optional[ScoreValidationException] = None

        for attempt in range(1, self._max_attempts + 1):
            with log_latency(logger, "relevance_completion", attempt=attempt):
                raw = await self._completion.generate(prompt, self._options)

            try:
                return self.parse_breakdown(raw)
            except ScoreValidationException as e:
                last_error = e
                logger.warning(
                    "Rejected relevance breakdown",
                    extra={
                        "attempt": attempt,
                        "max_attempts": self._max_attempts,
                        "reason": e.reason,
                    }
                )

        raise ScoringExhaustedException(self._max_attempts, last_error)

    @staticmethod
    def parse_breakdown(raw: str) -> DetailedScore:
        """
        Parse and validate a raw completion.

        Raises:
            ScoreValidationException: If the text is not a valid breakdown
        """
        if not isinstance(raw, str):
            raise ScoreValidationException("completion is not text", repr(raw))

        content_text = raw.strip()
        try:
            data = json.loads(content_text)
        except json.JSONDecodeError as e:
            if not content_text.startswith("```"):
                raise ScoreValidationException(f"not valid JSON ({e.msg})", raw)
            data = LLMScoringService._parse_fenced(content_text, raw)

        if not isinstance(data, dict):
            raise ScoreValidationException("JSON value is not an object", raw)

        try:
            return DetailedScore.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise ScoreValidationException(f"{location}: {first['msg']}", raw)

    @staticmethod
    def _parse_fenced(content_text: str, raw: str):
        """Parse a response wrapped in a ```json or bare ``` fence."""
        body = content_text[3:]
        if body.startswith("json"):
            body = body[4:]
        body = body.strip()
        if not body.endswith("```"):
            raise ScoreValidationException("unterminated markdown fence", raw)
        try:
            return json.loads(body[:-3].strip())
        except json.JSONDecodeError as e:
            raise ScoreValidationException(f"not valid JSON ({e.msg})", raw)


class RelevanceScoringService:
    """
    Public entry point of the relevance engine.

    Never raises: every failure resolves to ``neutral_score`` with an
    ``outcome`` telling why.
    """

    def __init__(
        self,
        analyzer: ITextAnalyzer,
        scorer: Optional[LLMScoringService] = None,
        disabled: bool = False,
        neutral_score: float = 0.5,
        knowledge_base_char_limit: int = 1500
    ):
        if scorer is None and not disabled:
            raise ConfigurationException("A scorer is required unless scoring is disabled")
        self._analyzer = analyzer
        self._scorer = scorer
        self._disabled = disabled
        self._neutral_score = neutral_score
        self._kb_char_limit = knowledge_base_char_limit

    @property
    def disabled(self) -> bool:
        return self._disabled

    async def calculate_relevance_score(
        self,
        summary: str,
        considerations: str,
        knowledge_base: FormattedKnowledgeBase
    ) -> float:
        """Relevance of a request to a knowledge base, in [0, 1]."""
        result = await self.calculate_detailed_relevance(summary, considerations, knowledge_base)
        return result.score

    async def calculate_detailed_relevance(
        self,
        summary: str,
        considerations: str,
        knowledge_base: FormattedKnowledgeBase
    ) -> RelevanceResult:
        """
        Relevance with breakdown, confidence and both analyses.

        Args:
            summary: Request summary (e.g. email subject)
            considerations: Request details (e.g. email body)
            knowledge_base: Recipient's formatted knowledge base

        Returns:
            RelevanceResult; breakdown fields are None on fallback
        """
        if self._disabled:
            logger.warning("Skipping relevance calculation - no completion credentials configured")
            result = self._fallback(ScoringOutcome.DISABLED)
        else:
            try:
                result = await self._score(summary, considerations, knowledge_base)
            except ScoringExhaustedException as e:
                logger.warning(
                    "Relevance breakdown unavailable - using neutral score",
                    extra={"attempts": e.attempts, "last_error": str(e.last_error)}
                )
                result = self._fallback(ScoringOutcome.RETRIES_EXHAUSTED)
            except Exception:
                logger.exception("Error calculating relevance score")
                result = self._fallback(ScoringOutcome.UNEXPECTED_ERROR)

        logger.info(
            "Relevance scoring finished",
            extra={"outcome": result.outcome.value, "score": round(result.score, 4)}
        )
        return result

    async def _score(
        self,
        summary: str,
        considerations: str,
        knowledge_base: FormattedKnowledgeBase
    ) -> RelevanceResult:
        request_text = f"{summary} {considerations}"
        kb_text = knowledge_base.analysis_text(self._kb_char_limit)
        corpus = [request_text, kb_text]

        request_analysis = self._analyzer.analyze(request_text, corpus)
        kb_analysis = self._analyzer.analyze(kb_text, corpus)
        pre_scores = SimilarityCalculator.pre_scores(request_analysis, kb_analysis)

        prompt = RelevancePromptBuilder.build_prompt(
            summary=summary,
            considerations=considerations,
            knowledge_base=knowledge_base,
            request_analysis=request_analysis,
            knowledge_base_analysis=kb_analysis,
            content_alignment=pre_scores.content_alignment,
            technical_match=pre_scores.technical_match,
        )
        breakdown = await self._scorer.score(prompt)

        return RelevanceResult(
            score=ScoreAggregator.final_score(breakdown),
            outcome=ScoringOutcome.SCORED,
            breakdown=breakdown,
            confidence=ScoreAggregator.confidence(breakdown),
            analysis=AnalysisPair(request=request_analysis, knowledge_base=kb_analysis),
        )

    def _fallback(self, outcome: ScoringOutcome) -> RelevanceResult:
        return RelevanceResult(score=self._neutral_score, outcome=outcome)
