"""Pydantic models for the authentication backend API."""

from pydantic import BaseModel

from qa_pilot.models.base import Model


class User(Model):
    """An authenticated identity."""

    name: str
    email: str


class AuthResponse(BaseModel):
    """Response from the signup and login endpoints."""

    user: User
    token: str


class ErrorResponse(BaseModel):
    """Error payload returned by the backend."""

    message: str | None = None
