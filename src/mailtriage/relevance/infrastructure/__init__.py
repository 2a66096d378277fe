"""
Relevance Infrastructure Layer
==============================

Infrastructure implementations for the relevance module.

Contains:
- Text Analysis: spaCy / scikit-learn feature extraction
- External: Completion client adapter and service wiring
"""

from mailtriage.relevance.infrastructure.text_analysis import (
    TextAnalyzer,
    load_nlp_pipeline,
)
from mailtriage.relevance.infrastructure.external import (
    CompletionClientAdapter,
    build_relevance_service,
)

__all__ = [
    "TextAnalyzer",
    "load_nlp_pipeline",
    "CompletionClientAdapter",
    "build_relevance_service",
]
