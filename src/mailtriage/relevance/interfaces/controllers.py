"""
Relevance Controllers (API Routes)
==================================

FastAPI routes for relevance scoring endpoints.

Controllers delegate to application services.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from mailtriage.config import RelevanceLevel, settings
from mailtriage.relevance.application import (
    DetailedScoreResponse,
    OverlapRequest,
    OverlapResponse,
    RelevanceScoringService,
    ScoreRequest,
    ScoreResponse,
)
from mailtriage.relevance.domain import (
    FormattedKnowledgeBase,
    RelevanceResult,
    ScoringOutcome,
    SimilarityCalculator,
)
from mailtriage.shared.infrastructure.logging import get_context_logger

router = APIRouter(prefix="/relevance", tags=["Relevance Scoring"])


# ========== Example payloads for Swagger ==========

SCORE_REQUEST_EXAMPLE = {
    "summary": "database performance optimization for checkout service",
    "considerations": "need replication and caching",
    "knowledge_base": {
        "entries": [
            {"question": "What do you do?", "answer": "Database consulting for online retailers."}
        ],
        "coalesced_summary": {
            "summary": "We specialize in database architecture, caching layers, and replication strategies for e-commerce.",
            "capabilities": ["replication", "caching"],
            "use_cases": ["checkout latency"],
            "limitations": ["no mobile apps"],
        },
        "industry": "e-commerce",
        "use_case": "performance consulting",
        "main_goals": ["win database projects"],
    },
}

SCORE_RESPONSE_EXAMPLE = {
    "score": 0.87,
    "level": "highly_relevant",
    "outcome": "scored",
}


# ========== Dependencies ==========

def get_relevance_service(request: Request) -> RelevanceScoringService:
    """Get relevance service from app state."""
    service = getattr(request.app.state, "relevance_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Relevance service not initialized"
        )
    return service


def _knowledge_base_or_400(payload: ScoreRequest) -> FormattedKnowledgeBase:
    knowledge_base = payload.knowledge_base.to_domain()
    if not knowledge_base.has_content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Knowledge base has no content"
        )
    return knowledge_base


async def _score(
    request: Request,
    payload: ScoreRequest,
    service: RelevanceScoringService
) -> RelevanceResult:
    logger = get_context_logger(__name__, getattr(request.state, "correlation_id", None))

    if payload.knowledge_base is None:
        # Without a knowledge base nothing can be filtered out
        logger.info("No knowledge base supplied - treating request as relevant")
        return RelevanceResult(score=1.0, outcome=ScoringOutcome.NO_KNOWLEDGE_BASE)

    knowledge_base = _knowledge_base_or_400(payload)
    logger.info(
        "Scoring request relevance",
        extra={
            "entries": len(knowledge_base.entries),
            "has_summary": knowledge_base.coalesced_summary is not None,
        }
    )
    return await service.calculate_detailed_relevance(
        payload.summary, payload.considerations, knowledge_base
    )


def _level(score: float) -> str:
    return RelevanceLevel.from_score(
        score, settings.highly_relevant_threshold, settings.low_relevance_threshold
    )


# ========== Route Handlers ==========

@router.post(
    "/score",
    response_model=ScoreResponse,
    summary="Score a request against a knowledge base",
    description="""
    Compute a relevance score in [0, 1] for an inbound request (e.g. an email
    subject and body) against the recipient's knowledge base.

    `outcome` tells whether the score was computed (`scored`) or is the neutral
    fallback (`disabled`, `retries_exhausted`, `unexpected_error`).
    """,
    responses={
        200: {
            "description": "Request scored",
            "content": {"application/json": {"example": SCORE_RESPONSE_EXAMPLE}}
        },
        400: {"description": "Knowledge base has no content"},
        503: {"description": "Relevance service not initialized"}
    }
)
async def score_request(
    request: Request,
    payload: ScoreRequest,
    service: RelevanceScoringService = Depends(get_relevance_service)
):
    result = await _score(request, payload, service)
    return ScoreResponse(
        score=result.score,
        level=_level(result.score),
        outcome=result.outcome.value
    )


@router.post(
    "/score/detailed",
    response_model=DetailedScoreResponse,
    summary="Score a request with breakdown and confidence",
    description="""
    Same as `/relevance/score`, plus the four-factor breakdown, a confidence
    value derived from how much the factors agree, and both text analyses.
    Breakdown fields are null when the score is a fallback.
    """
)
async def score_request_detailed(
    request: Request,
    payload: ScoreRequest,
    service: RelevanceScoringService = Depends(get_relevance_service)
):
    result = await _score(request, payload, service)
    return DetailedScoreResponse.from_result(result, _level(result.score))


@router.post(
    "/overlap",
    response_model=OverlapResponse,
    summary="Quick word-overlap score against organizational goals",
    description="Shared words over the size of the larger word set; no LLM call."
)
async def overlap_score(payload: OverlapRequest):
    return OverlapResponse(
        score=SimilarityCalculator.word_overlap(payload.text, payload.organizational_goals)
    )


relevance_router = router
