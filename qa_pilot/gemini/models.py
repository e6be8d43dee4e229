"""Pydantic models for Gemini generateContent requests and responses."""

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Part(BaseModel):
    """A text part of a content block."""

    text: str | None = None


class Content(BaseModel):
    """A single turn of conversation content."""

    role: Literal["user", "model"] | None = None
    parts: Sequence[Part] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str, role: Literal["user", "model"] = "user") -> "Content":
        """Build a single-part content block."""
        return cls(role=role, parts=[Part(text=text)])


class Candidate(BaseModel):
    """A generated candidate answer."""

    model_config = ConfigDict(populate_by_name=True)

    content: Content | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")


class GenerateContentResponse(BaseModel):
    """Response from the generateContent API."""

    candidates: Sequence[Candidate] = Field(default_factory=list)

    @property
    def text(self) -> str | None:
        """Concatenated text of the first candidate, or None when empty."""
        if not self.candidates or self.candidates[0].content is None:
            return None
        chunks = [p.text for p in self.candidates[0].content.parts if p.text]
        return "".join(chunks) or None
