"""Errors raised by the comparison layer and translated to HTTP responses by the API."""


class ComparisonError(Exception):
    """Base error for location comparison."""


class NotFoundError(ComparisonError):
    """A requirement, record, or location does not exist."""


class AccessDeniedError(ComparisonError):
    """The user is not an active member of the project."""


class AIServiceUnavailable(ComparisonError):
    """The AI service is not configured or failed to respond."""


class InvalidOperationError(ComparisonError):
    """The request is well-formed but conflicts with the current state."""
