"""
Relevance Module
================

Bounded Context for scoring inbound requests against a recipient's
knowledge base.

Responsibilities:
- Extract keywords, entities, concepts and technical terms from text
- Compute content-alignment and technical-match pre-scores
- Obtain a validated four-factor breakdown from a text completion model
- Aggregate the breakdown into one score and a confidence value
- Fall back to a neutral score whenever scoring cannot complete
"""
