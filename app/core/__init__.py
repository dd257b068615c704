"""Core utilities for configuration, logging, storage, clocks, and errors."""

__all__ = [
    "config",
    "logging",
    "storage",
    "clock",
    "errors",
]
