"""
mailtriage
==========

Email-triage relevance engine: scores inbound requests against a
recipient's knowledge base.
"""

__version__ = "1.0.0"
