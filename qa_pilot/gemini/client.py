"""Gemini generateContent client."""

import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from qa_pilot.gemini.config import GeminiConfig
from qa_pilot.gemini.models import Content, GenerateContentResponse

log = logging.getLogger(__name__)


class GeminiError(RuntimeError):
    """Raised when the Gemini API cannot produce an answer."""


class GeminiConfigurationError(GeminiError):
    """Raised when the client is used without an API key."""


@dataclass(frozen=True, kw_only=True)
class GeminiClient:
    """Thin async wrapper around the generateContent REST endpoint."""

    config: GeminiConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: GeminiConfig
    ) -> AsyncGenerator["GeminiClient", None]:
        """Create client with managed session lifecycle."""
        headers = {"Content-Type": "application/json"}
        if config.api_key is not None:
            headers["x-goog-api-key"] = config.api_key.get_secret_value()

        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers=headers,
        ) as session:
            yield cls(config=config, session=session)

    async def generate_content(
        self,
        contents: Sequence[Content],
        *,
        system_instruction: str | None = None,
        response_schema: Mapping[str, Any] | None = None,
    ) -> str | None:
        """Generate a completion and return its text.

        Args:
            contents: Conversation turns, oldest first
            system_instruction: Optional system prompt
            response_schema: Optional JSON schema; forces a JSON response

        Returns:
            Text of the first candidate, or None if the model returned nothing

        Raises:
            GeminiConfigurationError: If no API key is configured
            GeminiError: If the API answers with a non-200 status

        """
        if self.config.api_key is None:
            raise GeminiConfigurationError("API key not found in configuration")

        payload: dict[str, Any] = {
            "contents": [c.model_dump(exclude_none=True) for c in contents],
        }
        if system_instruction is not None:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if response_schema is not None:
            payload["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }

        url = f"/v1beta/models/{self.config.model}:generateContent"
        log.debug("Requesting completion: model=%s", self.config.model)

        async with self.session.post(url, json=payload) as response:
            if response.status != 200:
                text = await response.text()
                raise GeminiError(
                    f"Failed to generate content: {response.status} {text}"
                )
            data = await response.json()

        return GenerateContentResponse.model_validate(data).text
