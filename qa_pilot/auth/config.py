"""Configuration for the authentication backend client."""

from pydantic import BaseModel


class AuthConfig(BaseModel):
    """Configuration for the authentication backend client."""

    api_base_url: str = "http://localhost:5000"
    timeout: float = 10.0
