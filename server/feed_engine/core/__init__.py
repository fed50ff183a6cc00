"""
Feed Engine Core Utilities
"""
from feed_engine.core.types import (
    ConfigurationError,
    FeedEngineError,
    FetchError,
)

__all__ = [
    "ConfigurationError",
    "FeedEngineError",
    "FetchError",
]
