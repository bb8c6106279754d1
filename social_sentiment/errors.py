from __future__ import annotations


class ConfigError(RuntimeError):
    """Raised when configuration is missing or invalid."""


class ValidationError(RuntimeError):
    """Raised when a search query is empty or whitespace-only."""


class FetchError(RuntimeError):
    """Raised when the post search call or its response handling fails."""


class ScoreError(RuntimeError):
    """Raised when a sentiment scoring call or structured parse fails."""


class AggregationError(RuntimeError):
    """Raised when posts and sentiment results cannot be aggregated."""


class EmptyInputError(AggregationError):
    """Raised when there are no sentiment results to average."""


class MisalignedInputError(AggregationError):
    """Raised when posts and sentiment results differ in length."""


class ExportError(RuntimeError):
    """Raised when writing a dashboard export fails."""
