"""
Custom Exceptions
Error hierarchy for the trend engine.
"""


class TrendForgeError(Exception):
    """Base error for the trend engine."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(TrendForgeError):
    """Invalid engine configuration."""
    pass


class InputValidationError(TrendForgeError):
    """Run-level input is unusable; the run produces no output."""

    def __init__(self, message: str, field: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.field = field
