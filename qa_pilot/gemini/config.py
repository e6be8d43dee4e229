"""Configuration for the Gemini API client."""

from pydantic import BaseModel, SecretStr


class GeminiConfig(BaseModel):
    """Configuration for the Gemini API client."""

    # A missing key is reported per request so callers can fall back.
    api_key: SecretStr | None = None
    model: str = "gemini-2.5-flash"
    api_base_url: str = "https://generativelanguage.googleapis.com"
