"""Domain exceptions raised by the calculation engine.

Both derive from ``ValueError`` so callers that already guard engine calls
with ``except ValueError`` keep working.
"""

from typing import Any


class YieldcoreError(ValueError):
    """Base exception for all engine errors."""

    def __init__(self, message: str, value: Any = None):
        self.message = message
        self.value = value
        super().__init__(message)


class InvalidTimestamp(YieldcoreError):
    """An as-of time could not be parsed."""

    def __init__(self, value: Any):
        super().__init__(f"Invalid timestamp: {value!r}", value=value)


class ConfigurationError(YieldcoreError):
    """An investment record carries an enum value the engine does not know."""

    def __init__(self, field: str, value: Any):
        self.field = field
        super().__init__(f"Unknown {field} value: {value!r}", value=value)
