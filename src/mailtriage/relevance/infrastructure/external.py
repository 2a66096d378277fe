"""
Relevance External Service Adapters
===================================

Adapters for external services used by the relevance module, and the
factory that wires the scoring service from configuration.
"""

from typing import Optional

from spacy.language import Language

from mailtriage.config import Settings
from mailtriage.core import ConfigurationException
from mailtriage.infrastructure.llm import (
    GenerationOptions,
    ITextCompletionClient,
    create_completion_client,
)
from mailtriage.relevance.application import (
    ITextCompletion,
    LLMScoringService,
    RelevanceScoringService,
)
from mailtriage.relevance.infrastructure.text_analysis import TextAnalyzer, load_nlp_pipeline
from mailtriage.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CompletionClientAdapter(ITextCompletion):
    """
    Adapter that wraps an infrastructure completion client.

    Implements the application layer ITextCompletion interface, exposing
    only the completion text.
    """

    def __init__(self, client: ITextCompletionClient):
        self._client = client

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        result = await self._client.complete(prompt, options)
        logger.debug(
            "Completion received",
            extra={
                "model": result.model,
                "prompt_tokens": result.prompt_tokens,
                "completion_tokens": result.completion_tokens,
                "latency_ms": result.latency_ms,
            }
        )
        return result.content


def build_relevance_service(
    settings: Settings,
    nlp: Optional[Language] = None,
    completion_client: Optional[ITextCompletionClient] = None
) -> RelevanceScoringService:
    """
    Wire a RelevanceScoringService from settings.

    Scoring is disabled (neutral score for every call) when no completion
    client is given and none can be configured from settings.
    """
    analyzer = TextAnalyzer(
        nlp if nlp is not None else load_nlp_pipeline(settings.spacy_model),
        keyword_limit=settings.keyword_limit,
    )

    if completion_client is None and not settings.scoring_disabled:
        try:
            completion_client = create_completion_client(settings)
        except ConfigurationException as e:
            logger.warning(f"Completion client not configured - relevance scoring disabled: {e}")

    if completion_client is None:
        return RelevanceScoringService(
            analyzer,
            disabled=True,
            neutral_score=settings.neutral_score,
            knowledge_base_char_limit=settings.knowledge_base_char_limit,
        )

    scorer = LLMScoringService(
        CompletionClientAdapter(completion_client),
        options=GenerationOptions.from_settings(settings),
        max_attempts=settings.scoring_max_attempts,
    )
    return RelevanceScoringService(
        analyzer,
        scorer,
        neutral_score=settings.neutral_score,
        knowledge_base_char_limit=settings.knowledge_base_char_limit,
    )
