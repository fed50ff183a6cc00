"""
Core Type Definitions and Exceptions

Service-specific exceptions. Errors carry a context dict that is rendered
into the message so log lines stay self-describing.
"""
from __future__ import annotations

from typing import Any, Optional


class FeedEngineError(Exception):
    """Base exception for all feed engine errors."""

    def __init__(
        self,
        message: str,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class ConfigurationError(FeedEngineError):
    """Raised when configuration is missing or invalid."""


class FetchError(FeedEngineError):
    """Describes why a single source could not be fetched."""

    def __init__(
        self,
        message: str,
        url: str,
        status: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = context or {}
        ctx["url"] = url
        if status is not None:
            ctx["status"] = status
        super().__init__(message, ctx)
        self.url = url
        self.status = status
