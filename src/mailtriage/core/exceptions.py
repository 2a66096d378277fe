"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class LLMException(ExternalServiceException):
    """Exception for LLM API failures."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("LLM Service", message, details)


class ScoreValidationException(ValidationException):
    """Raised when a model response is not a valid relevance breakdown."""

    def __init__(self, reason: str, raw_response: str):
        self.reason = reason
        self.raw_response = raw_response
        super().__init__(
            f"Invalid relevance breakdown: {reason}",
            {"raw_response": raw_response[:500]}
        )


class ScoringExhaustedException(DomainException):
    """Raised when every completion attempt produced an invalid breakdown."""

    def __init__(self, attempts: int, last_error: Optional[Exception] = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"No valid relevance breakdown after {attempts} attempts",
            {"attempts": attempts, "last_error": str(last_error) if last_error else None}
        )
