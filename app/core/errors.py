"""Custom exception hierarchy for the pick verification stack."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class AppError(Exception):
    """Base error for the application."""


class ConfigurationError(AppError):
    """Raised when an essential configuration input is missing or invalid."""


class ArtifactError(AppError):
    """Raised for a JSON artifact that cannot be read or written."""

    def __init__(self, message: str, path: Path, *, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
        self.detail = detail


class ArtifactParseError(ArtifactError):
    """Raised when a JSON artifact is malformed or violates its schema."""


class ArtifactWriteError(ArtifactError):
    """Raised when a JSON artifact cannot be persisted."""


class MarketDataError(AppError):
    """Raised when the market data provider returns an error response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "AppError",
    "ConfigurationError",
    "ArtifactError",
    "ArtifactParseError",
    "ArtifactWriteError",
    "MarketDataError",
]
