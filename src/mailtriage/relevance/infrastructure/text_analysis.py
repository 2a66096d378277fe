"""
Text Analysis
=============

Feature extraction for relevance scoring, built on spaCy and scikit-learn.

The spaCy pipeline is injected so tests can run on a blank English
pipeline with an entity ruler instead of a downloaded statistical model.
TF-IDF weights are fitted per call over the documents being compared;
nothing is accumulated between calls.
"""

import re
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

import spacy
from spacy.language import Language
from spacy.tokens import Doc
from sklearn.feature_extraction.text import TfidfVectorizer

from mailtriage.config import TECHNICAL_TERMS, TOPIC_LEXICON
from mailtriage.relevance.application import ITextAnalyzer
from mailtriage.relevance.domain import TextAnalysis
from mailtriage.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# People, places and organizations
ENTITY_LABELS = frozenset({"PERSON", "GPE", "LOC", "ORG"})

SENTENCE_BOUNDARY = re.compile(r"[.!?]+")

# Tokens longer than three characters
TFIDF_TOKEN_PATTERN = r"(?u)\b\w{4,}\b"

NEGATIONS = frozenset({"not", "no", "never", "n't", "cannot", "without"})

# AFINN-style polarity weights
SENTIMENT_LEXICON: Dict[str, int] = {
    "excellent": 3, "amazing": 3, "outstanding": 3, "love": 3, "perfect": 3,
    "great": 3, "good": 2, "happy": 2, "glad": 2, "helpful": 2, "thanks": 2,
    "thank": 2, "appreciate": 2, "success": 2, "successful": 2, "improve": 2,
    "improved": 2, "strong": 2, "reliable": 2, "interested": 2, "like": 2,
    "nice": 2, "fast": 1, "easy": 1, "please": 1, "support": 1, "opportunity": 1,
    "bad": -2, "poor": -2, "slow": -2, "problem": -2, "problems": -2,
    "issue": -1, "issues": -1, "difficult": -1, "concern": -1, "concerns": -1,
    "error": -2, "errors": -2, "fail": -2, "failed": -2, "failure": -2,
    "broken": -2, "angry": -3, "frustrated": -2, "urgent": -1, "unhappy": -2,
    "terrible": -3, "awful": -3, "worst": -3, "hate": -3, "outage": -2,
    "crash": -2, "spam": -2, "scam": -3, "wrong": -2, "unfortunately": -2,
}


def load_nlp_pipeline(model_name: str = "en_core_web_sm") -> Language:
    """
    Load a spaCy pipeline by package name.

    When the model package is not installed the service keeps running on
    a blank English tokenizer, without statistical entity recognition.
    """
    try:
        nlp = spacy.load(model_name)
    except OSError as e:
        logger.warning(
            f"spaCy model '{model_name}' not available - entity recognition disabled: {e}"
        )
        return spacy.blank("en")
    logger.info("Loaded spaCy pipeline", extra={"model": model_name, "pipes": nlp.pipe_names})
    return nlp


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


class TextAnalyzer(ITextAnalyzer):
    """
    Turns one block of text into a ``TextAnalysis``.

    Holds no per-call state; one instance can serve concurrent calls.
    """

    def __init__(
        self,
        nlp: Language,
        keyword_limit: int = 10,
        technical_terms: FrozenSet[str] = TECHNICAL_TERMS,
        topic_lexicon: Dict[str, FrozenSet[str]] = TOPIC_LEXICON
    ):
        self._nlp = nlp
        self._keyword_limit = keyword_limit
        self._technical_terms = technical_terms
        self._topic_lexicon = topic_lexicon

    def analyze(self, text: str, corpus: Optional[Sequence[str]] = None) -> TextAnalysis:
        """
        Extract keywords, entities, concepts, technical terms, sentiment
        and complexity.

        Args:
            text: Text to analyze
            corpus: Documents to fit TF-IDF weights over; ``text`` is added
                if missing. Defaults to ``[text]``.

        Returns:
            TextAnalysis (empty, with complexity 0, for blank text)
        """
        if not text or not text.strip():
            return TextAnalysis.empty()

        doc = self._nlp(text)
        words = [t.lower_ for t in doc if not (t.is_punct or t.is_space)]

        entities = self.extract_entities(doc)
        technical_terms = [w for w in words if w in self._technical_terms]

        return TextAnalysis(
            keywords=self.extract_keywords(text, entities, technical_terms, corpus),
            entities=entities,
            concepts=self.extract_concepts(words),
            technical_terms=technical_terms,
            sentiment=self.sentiment(words),
            complexity=self.complexity(text, words),
        )

    def extract_entities(self, doc: Doc) -> List[str]:
        return _unique(ent.text.strip() for ent in doc.ents if ent.label_ in ENTITY_LABELS)

    def extract_keywords(
        self,
        text: str,
        entities: List[str],
        technical_terms: List[str],
        corpus: Optional[Sequence[str]] = None
    ) -> List[str]:
        candidates = self._tfidf_terms(text, corpus)
        candidates += [e.lower() for e in entities]
        candidates += technical_terms
        return _unique(candidates)[:self._keyword_limit]

    def _tfidf_terms(self, text: str, corpus: Optional[Sequence[str]]) -> List[str]:
        documents = list(corpus) if corpus else [text]
        if text not in documents:
            documents.append(text)

        vectorizer = TfidfVectorizer(token_pattern=TFIDF_TOKEN_PATTERN, stop_words="english")
        try:
            matrix = vectorizer.fit_transform(documents)
        except ValueError:
            # Only stop words or short tokens: no vocabulary to weight
            return []

        weights = matrix[documents.index(text)].toarray()[0]
        terms = vectorizer.get_feature_names_out()
        ranked = sorted(
            ((weight, term) for weight, term in zip(weights, terms) if weight > 0),
            key=lambda pair: (-pair[0], pair[1])
        )
        return [term for _, term in ranked[:self._keyword_limit]]

    def extract_concepts(self, words: List[str]) -> List[str]:
        """
        Coarse topic tags, in lexicon order.

        Only topic names are returned, never tokens from the text.
        """
        vocabulary = set(words)
        return [
            topic for topic, triggers in self._topic_lexicon.items()
            if vocabulary & triggers
        ]

    @staticmethod
    def sentiment(words: List[str]) -> float:
        """Average lexicon polarity per word; a preceding negation flips it."""
        if not words:
            return 0.0
        total = 0
        for i, word in enumerate(words):
            polarity = SENTIMENT_LEXICON.get(word, 0)
            if polarity and i > 0 and words[i - 1] in NEGATIONS:
                polarity = -polarity
            total += polarity
        return total / len(words)

    @staticmethod
    def complexity(text: str, words: List[str]) -> float:
        """
        0.5 * words per sentence + 0.5 * share of words over 8 characters,
        capped at 1.0.
        """
        sentences = [s for s in SENTENCE_BOUNDARY.split(text) if s.strip()]
        if not sentences or not words:
            return 0.0
        words_per_sentence = len(words) / len(sentences)
        long_word_share = sum(1 for w in words if len(w) > 8) / len(words)
        return min(1.0, 0.5 * words_per_sentence + 0.5 * long_word_share)
