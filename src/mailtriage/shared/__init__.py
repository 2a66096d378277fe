"""
Shared Kernel Module
====================

Shared infrastructure used across bounded contexts.

Architecture Pattern: Modular Monolith
- Each module (relevance) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add relevance scoring logic to the shared kernel.
"""
