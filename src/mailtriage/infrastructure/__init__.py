"""
Infrastructure Layer
=====================

External API clients shared by bounded contexts:
- Text completion providers (Gemini, OpenAI, Z.AI)
"""
