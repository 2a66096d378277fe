"""Test doubles and canned inputs shared across test modules."""

from __future__ import annotations

import json

from mailtriage.relevance.application import ITextCompletion

SCENARIO_SUMMARY = "database performance optimization for checkout service"
SCENARIO_CONSIDERATIONS = "need replication and caching"
SCENARIO_KB_SUMMARY = (
    "We specialize in database architecture, caching layers, "
    "and replication strategies for e-commerce."
)


def breakdown_json(
    content: float,
    technical: float,
    domain: float,
    contextual: float,
    explanation: str = "stubbed breakdown",
) -> str:
    """Serialize a breakdown the way the model is asked to answer."""
    return json.dumps({
        "contentAlignment": content,
        "technicalLevelMatch": technical,
        "domainRelevance": domain,
        "contextualFit": contextual,
        "explanation": explanation,
    })


class StubCompletion(ITextCompletion):
    """Replays queued responses; exceptions in the queue are raised."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def generate(self, prompt, options):
        self.prompts.append(prompt)
        # The last response repeats once the queue runs dry
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        return response
