"""Authentication backend client module."""

from qa_pilot.auth.client import AuthClient, AuthError
from qa_pilot.auth.config import AuthConfig
from qa_pilot.auth.models import User

__all__ = ["AuthClient", "AuthConfig", "AuthError", "User"]
