"""
Error taxonomy for quiz generation.

Strategy-level problems are reported as StrategyFailure values (see
sickohoops.sources.base); the exceptions here are what escapes the
resolver once the whole chain is exhausted, plus the client errors raised
by the external data sources.
"""

from typing import Optional


class QuizGenerationError(Exception):
    """Base class for terminal quiz generation failures."""

    code = "QuizGenerationError"
    message = "Failed to generate quiz. Please try again with a different topic."

    def __init__(self, details: Optional[str] = None, failures: Optional[list] = None):
        super().__init__(details or self.message)
        self.details = details
        self.failures = list(failures or [])

    def to_dict(self) -> dict:
        """Failure response body: {error, message, details?}."""
        body = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class SourceUnavailableError(QuizGenerationError):
    """Every acquisition strategy failed (network, timeout, provider errors)."""

    code = "SourceUnavailable"
    message = (
        "Quiz data sources are unavailable right now. "
        "Please try again in a moment."
    )


class EmptyResultError(QuizGenerationError):
    """The pipeline completed but produced zero answer records."""

    code = "EmptyResult"
    message = (
        "No answers were found for that topic. "
        "Try a more specific topic, for example a stat, a year range or a team."
    )


class ExtractionFailedError(QuizGenerationError):
    """Generated text never yielded parseable JSON after the repair chain."""

    code = "ExtractionFailed"
    message = "The generated quiz could not be parsed."


class ValidationFailedError(QuizGenerationError):
    """Payload is missing required shape beyond recoverable defaults."""

    code = "ValidationFailed"
    message = "The generated quiz did not have the expected structure."


class ResolutionCancelled(Exception):
    """A newer quiz request superseded the one being resolved."""


class ProviderError(RuntimeError):
    """A generative provider call failed or timed out."""


class StatsAPIError(RuntimeError):
    """The live NBA stats source failed or returned an unusable response."""
