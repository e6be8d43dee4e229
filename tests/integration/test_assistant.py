"""Integration tests for the chat assistant."""

from collections.abc import AsyncGenerator

import pytest
from aioresponses import aioresponses as aioresponses_cls
from pydantic import SecretStr
from yarl import URL

from qa_pilot.assistant import (
    ANALYSIS_FALLBACK,
    APOLOGY_REPLY,
    EMPTY_ANALYSIS,
    EMPTY_REPLY,
    ChatAssistant,
    ChatTurn,
)
from qa_pilot.gemini import GeminiClient, GeminiConfig
from qa_pilot.testing.gemini.payloads import generate_content_response

API_BASE_URL = "http://gemini.test"
GENERATE_URL = f"{API_BASE_URL}/v1beta/models/gemini-2.5-flash:generateContent"


@pytest.fixture
async def assistant(
    aioresponses: aioresponses_cls,
) -> AsyncGenerator[ChatAssistant, None]:
    """Create assistant with managed client session."""
    config = GeminiConfig(api_key=SecretStr("test-key"), api_base_url=API_BASE_URL)
    async with GeminiClient.from_config(config) as client:
        yield ChatAssistant(client=client)


class TestReply:
    """Tests for ChatAssistant.reply."""

    async def test_sends_history_and_new_message(
        self, assistant: ChatAssistant, aioresponses: aioresponses_cls
    ) -> None:
        """Sends prior turns in order followed by the new message."""
        aioresponses.post(
            GENERATE_URL, payload=generate_content_response("Use CSS selectors.")
        )
        history = [
            ChatTurn(role="model", text="Hi! How can I help?"),
            ChatTurn(role="user", text="My tests are flaky."),
        ]

        answer = await assistant.reply(history, "How do I locate buttons?")

        assert answer == "Use CSS selectors."
        call = aioresponses.requests[("POST", URL(GENERATE_URL))][0]
        contents = call.kwargs["json"]["contents"]
        assert [c["role"] for c in contents] == ["model", "user", "user"]
        assert contents[-1]["parts"] == [{"text": "How do I locate buttons?"}]
        assert "systemInstruction" in call.kwargs["json"]

    async def test_returns_apology_on_failure(
        self,
        assistant: ChatAssistant,
        aioresponses: aioresponses_cls,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Returns the fixed apology instead of raising."""
        aioresponses.post(GENERATE_URL, status=500, body="boom")

        answer = await assistant.reply([], "Hello?")

        assert answer == APOLOGY_REPLY
        (record,) = [r for r in caplog.records if r.levelname == "WARNING"]
        assert record.exc_info is not None

    async def test_returns_placeholder_on_empty_answer(
        self, assistant: ChatAssistant, aioresponses: aioresponses_cls
    ) -> None:
        """An empty model answer yields the connection placeholder."""
        aioresponses.post(GENERATE_URL, payload=generate_content_response(None))

        answer = await assistant.reply([], "Hello?")

        assert answer == EMPTY_REPLY

    async def test_returns_apology_without_api_key(self) -> None:
        """A missing API key is absorbed like any other failure."""
        async with GeminiClient.from_config(GeminiConfig()) as client:
            answer = await ChatAssistant(client=client).reply([], "Hello?")

        assert answer == APOLOGY_REPLY


class TestAnalyzeDefect:
    """Tests for ChatAssistant.analyze_defect."""

    async def test_returns_analysis(
        self, assistant: ChatAssistant, aioresponses: aioresponses_cls
    ) -> None:
        """Prompts with the case name and logs."""
        aioresponses.post(
            GENERATE_URL,
            payload=generate_content_response("A modal overlay hid the button."),
        )

        answer = await assistant.analyze_defect(
            "Checkout", ["Taking screenshot...", "Simulating click event..."]
        )

        assert answer == "A modal overlay hid the button."
        call = aioresponses.requests[("POST", URL(GENERATE_URL))][0]
        prompt = call.kwargs["json"]["contents"][0]["parts"][0]["text"]
        assert 'failed test case named "Checkout"' in prompt
        assert "Taking screenshot...\nSimulating click event..." in prompt

    async def test_returns_fallback_on_failure(
        self, assistant: ChatAssistant, aioresponses: aioresponses_cls
    ) -> None:
        """Returns the fixed timeout explanation on failure."""
        aioresponses.post(GENERATE_URL, exception=ConnectionError("refused"))

        answer = await assistant.analyze_defect("Checkout", [])

        assert answer == ANALYSIS_FALLBACK

    async def test_returns_placeholder_on_empty_answer(
        self, assistant: ChatAssistant, aioresponses: aioresponses_cls
    ) -> None:
        """An empty model answer yields the unknown-error text."""
        aioresponses.post(GENERATE_URL, payload=generate_content_response(None))

        answer = await assistant.analyze_defect("Checkout", [])

        assert answer == EMPTY_ANALYSIS
