"""
Utils Module
Shared helpers: logging, errors, rank statistics.
"""
from .logger import setup_logger, get_logger
from .exceptions import (
    TrendForgeError,
    ConfigurationError,
    InputValidationError,
)
from .stats import midrank_percentiles

__all__ = [
    "setup_logger",
    "get_logger",
    "TrendForgeError",
    "ConfigurationError",
    "InputValidationError",
    "midrank_percentiles",
]
