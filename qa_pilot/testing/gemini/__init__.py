"""Gemini API test helpers."""
