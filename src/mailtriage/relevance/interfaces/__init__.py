"""
Relevance Interfaces Layer
==========================

Interface adapters (controllers) for the relevance module.

Contains:
- Controllers: FastAPI route handlers
"""

from mailtriage.relevance.interfaces.controllers import relevance_router

__all__ = ["relevance_router"]
