"""
Storage Module
In-process caching for hosting processes.
"""
from .cache import (
    BaseCache,
    MemoryCache,
)

__all__ = [
    "BaseCache",
    "MemoryCache",
]
