"""
Configuration Module
====================

Application settings and scoring constants using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from typing import Dict, List, Literal, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="mailtriage", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Text Completion Provider ==========
    llm_provider: Literal["gemini", "openai", "zai"] = Field(
        default="gemini",
        description="Text completion provider used for relevance breakdowns"
    )
    google_ai_key: Optional[str] = Field(
        default=None,
        description="Google Generative AI key (Gemini)"
    )
    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key"
    )
    openai_base_url: Optional[str] = Field(
        default=None,
        description="Override for OpenAI-compatible endpoints (e.g. Groq)"
    )
    zai_api_key: Optional[str] = Field(
        default=None,
        description="Z.AI API key for GLM models"
    )
    mock_llm: bool = Field(
        default=False,
        description="Use mock completion responses for testing (no API calls)"
    )

    # ========== LLM Sampling ==========
    llm_model: str = Field(
        default="gemini-1.5-pro",
        description="Model name passed to the completion provider"
    )
    llm_temperature: float = Field(default=0.0, description="Sampling temperature", ge=0.0, le=1.0)
    llm_top_k: int = Field(default=1, description="Top-k sampling", ge=1)
    llm_top_p: float = Field(default=1.0, description="Nucleus sampling", ge=0.0, le=1.0)
    llm_max_output_tokens: int = Field(
        default=1024,
        description="Maximum tokens in a completion",
        ge=1,
        le=8192
    )

    # ========== Relevance Scoring ==========
    scoring_max_attempts: int = Field(
        default=3,
        description="Completion attempts before falling back to the neutral score",
        ge=1,
        le=10
    )
    neutral_score: float = Field(
        default=0.5,
        description="Score returned whenever scoring cannot complete",
        ge=0.0,
        le=1.0
    )
    knowledge_base_char_limit: int = Field(
        default=1500,
        description="Characters of raw entries analyzed when no coalesced summary exists",
        ge=100
    )
    keyword_limit: int = Field(default=10, description="Keywords kept per analysis", ge=1)
    spacy_model: str = Field(default="en_core_web_sm", description="spaCy pipeline to load")
    highly_relevant_threshold: float = Field(
        default=0.8,
        description="Scores at or above this are labelled highly relevant",
        ge=0.0,
        le=1.0
    )
    low_relevance_threshold: float = Field(
        default=0.5,
        description="Scores below this are labelled low relevance and should not be delivered",
        ge=0.0,
        le=1.0
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @property
    def completion_api_key(self) -> Optional[str]:
        """API key for the selected completion provider."""
        keys = {
            "gemini": self.google_ai_key,
            "openai": self.openai_api_key,
            "zai": self.zai_api_key,
        }
        return keys[self.llm_provider] or None

    @property
    def scoring_disabled(self) -> bool:
        """True when no completion backend can be reached."""
        return not (self.mock_llm or self.completion_api_key)


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class RelevanceLevel(str):
    """Notification labels derived from a relevance score."""
    HIGHLY_RELEVANT = "highly_relevant"
    MODERATELY_RELEVANT = "moderately_relevant"
    LOW_RELEVANCE = "low_relevance"

    @staticmethod
    def from_score(score: float, threshold: float = 0.8, low_threshold: float = 0.5) -> str:
        if score >= threshold:
            return RelevanceLevel.HIGHLY_RELEVANT
        if score < low_threshold:
            return RelevanceLevel.LOW_RELEVANCE
        return RelevanceLevel.MODERATELY_RELEVANT


# Whole-token, lower-case matches only
TECHNICAL_TERMS = frozenset({
    "api", "architecture", "database", "algorithm", "optimization",
    "security", "infrastructure", "framework", "protocol", "middleware",
    "runtime", "compiler", "deployment", "authentication", "authorization",
    "encryption", "scalability", "redundancy", "latency",
})

# Coarse topic tags: a topic applies when any trigger token appears
TOPIC_LEXICON: Dict[str, frozenset] = {
    "data storage": frozenset({
        "database", "databases", "sql", "postgres", "mysql", "replication",
        "caching", "cache", "storage", "schema", "query", "queries",
    }),
    "performance": frozenset({
        "performance", "latency", "optimization", "throughput",
        "scalability", "caching", "speed", "bottleneck",
    }),
    "security": frozenset({
        "security", "authentication", "authorization", "encryption",
        "compliance", "vulnerability", "breach", "password",
    }),
    "infrastructure": frozenset({
        "infrastructure", "deployment", "cloud", "kubernetes", "servers",
        "server", "hosting", "redundancy", "devops",
    }),
    "software development": frozenset({
        "api", "framework", "compiler", "runtime", "middleware", "code",
        "architecture", "algorithm", "protocol", "integration",
    }),
    "commerce": frozenset({
        "checkout", "commerce", "ecommerce", "payments", "payment",
        "retail", "orders", "cart", "pricing",
    }),
    "sales": frozenset({
        "sales", "partnership", "partnerships", "proposal", "quote",
        "contract", "pricing", "deal",
    }),
    "support": frozenset({
        "support", "issue", "bug", "outage", "incident", "ticket", "help",
    }),
    "hiring": frozenset({
        "hiring", "candidate", "resume", "interview", "recruiting", "role",
    }),
    "food and dining": frozenset({
        "lunch", "dinner", "restaurant", "restaurants", "food", "cafe",
        "breakfast", "menu",
    }),
    "travel and places": frozenset({
        "downtown", "travel", "hotel", "flight", "nearby", "near", "trip",
    }),
}

# Weights of the four breakdown factors; must sum to 1.0
SCORE_WEIGHTS: Dict[str, float] = {
    "content_alignment": 0.35,
    "technical_level_match": 0.20,
    "domain_relevance": 0.25,
    "contextual_fit": 0.20,
}
