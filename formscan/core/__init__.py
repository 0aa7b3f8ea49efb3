"""Core utilities: configuration and logging."""
from .config import (
    BrowserConfig,
    ClaudeConfig,
    ExtractorConfig,
    FillConfig,
    Settings,
    TypeRule,
)
from .logging import setup_logging

__all__ = [
    "Settings",
    "BrowserConfig",
    "ClaudeConfig",
    "ExtractorConfig",
    "FillConfig",
    "TypeRule",
    "setup_logging",
]
