"""Conversational assistant and defect analysis backed by Gemini."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from pydantic import Field

from qa_pilot.gemini import Content, GeminiClient
from qa_pilot.models.base import Model

log = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = "You are TestPilot AI Assistant. Help users with QA automation."

APOLOGY_REPLY = (
    "I'm sorry, I cannot process your request at the moment. "
    "Please check your API Key configuration."
)
EMPTY_REPLY = "I'm having trouble connecting right now."

ANALYSIS_FALLBACK = "Timeout occurred during element interaction."
EMPTY_ANALYSIS = "Unknown error detected in automated analysis."

ANALYSIS_PROMPT = """\
Analyze these test logs for a failed test case named "{name}" and provide a \
short 1-sentence root cause analysis.
Logs:
{logs}
"""


class ChatTurn(Model):
    """One prior message in a conversation."""

    role: Literal["user", "model"] = Field(..., description="Author of the turn")
    text: str = Field(..., description="Message text")


@dataclass(frozen=True, kw_only=True)
class ChatAssistant:
    """Stateless assistant; callers keep the conversation history.

    Neither method raises for upstream failures: a fixed fallback text is
    returned instead.
    """

    client: GeminiClient

    async def reply(self, prior_turns: Sequence[ChatTurn], new_message: str) -> str:
        """Answer ``new_message`` in the context of ``prior_turns``."""
        contents = [Content.from_text(turn.text, turn.role) for turn in prior_turns]
        contents.append(Content.from_text(new_message))

        try:
            text = await self.client.generate_content(
                contents, system_instruction=SYSTEM_INSTRUCTION
            )
        except Exception as e:
            log.warning("Chat request failed: %s", e, exc_info=e)
            return APOLOGY_REPLY

        return text or EMPTY_REPLY

    async def analyze_defect(self, case_name: str, logs: Sequence[str]) -> str:
        """Return a one-sentence root cause guess for a failed case."""
        prompt = ANALYSIS_PROMPT.format(name=case_name, logs="\n".join(logs))

        try:
            text = await self.client.generate_content([Content.from_text(prompt)])
        except Exception as e:
            log.warning(
                "Defect analysis failed for %s: %s", case_name, e, exc_info=e
            )
            return ANALYSIS_FALLBACK

        return text or EMPTY_ANALYSIS
