"""Gemini API client module."""

from qa_pilot.gemini.client import GeminiClient, GeminiConfigurationError, GeminiError
from qa_pilot.gemini.config import GeminiConfig
from qa_pilot.gemini.models import Content, Part

__all__ = [
    "Content",
    "GeminiClient",
    "GeminiConfig",
    "GeminiConfigurationError",
    "GeminiError",
    "Part",
]
