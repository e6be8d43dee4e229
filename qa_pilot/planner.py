"""Plan generation with a deterministic fallback."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from qa_pilot.gemini import Content, GeminiClient
from qa_pilot.models.plan import PLAN_ADAPTER, PlanItem

log = logging.getLogger(__name__)

FALLBACK_PLAN: Sequence[PlanItem] = (
    PlanItem(
        name="Homepage Load Performance",
        description="Verify LCP is under 2.5s and no console errors.",
    ),
    PlanItem(
        name="Navigation Integrity",
        description="Check all header and footer links return 200 OK.",
    ),
    PlanItem(
        name="Mobile Responsiveness",
        description="Verify layout adaptation at 375px width.",
    ),
    PlanItem(
        name="Form Input Validation",
        description=(
            "Ensure inputs handle special characters and empty states correctly."
        ),
    ),
    PlanItem(
        name="Critical User Flow",
        description="Simulate a primary user action journey.",
    ),
)

PLAN_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "name": {
                "type": "STRING",
                "description": "Short title of the test case",
            },
            "description": {
                "type": "STRING",
                "description": "One sentence explanation of what is being tested",
            },
        },
        "required": ["name", "description"],
        "propertyOrdering": ["name", "description"],
    },
}

PLAN_PROMPT = """\
You are an expert QA Automation Engineer.
I need you to generate a test plan for the following website:
URL: {url}
Description/Context: {description}

Please generate 5 to 7 critical automated test cases that cover functional, \
UI, and workflow aspects.
Focus on happy paths and common edge cases.
"""


@dataclass(frozen=True, kw_only=True)
class PlanGenerator(ABC):
    """Abstract source of test plans.

    Subclasses implement ``generate_plan`` and may raise freely; callers use
    ``request_plan``, which never raises for upstream failures.
    """

    @abstractmethod
    async def generate_plan(self, url: str, description: str) -> Sequence[PlanItem]:
        """Ask the upstream capability for an ordered plan."""

    async def request_plan(
        self,
        url: str,
        description: str,
        timeout: float | None = None,
    ) -> Sequence[PlanItem]:
        """Return a plan for the target, or the fallback plan on any failure.

        Args:
            url: Target URL
            description: Free-text context for the planner
            timeout: Seconds to wait for the upstream (None waits indefinitely)

        Returns:
            Ordered plan items; an empty upstream plan is returned as-is

        """
        try:
            async with asyncio.timeout(timeout):
                plan = await self.generate_plan(url, description)
        except Exception as e:
            log.warning(
                "Plan generation failed, using fallback plan: %s", e, exc_info=e
            )
            return FALLBACK_PLAN

        log.info("Received plan with %d test case(s) for %s", len(plan), url)
        return plan


@dataclass(frozen=True, kw_only=True)
class GeminiPlanGenerator(PlanGenerator):
    """Plan generator backed by Gemini structured output."""

    client: GeminiClient

    async def generate_plan(self, url: str, description: str) -> Sequence[PlanItem]:
        """Prompt Gemini for 5 to 7 test cases as a JSON array."""
        prompt = PLAN_PROMPT.format(url=url, description=description)
        text = await self.client.generate_content(
            [Content.from_text(prompt)],
            response_schema=PLAN_RESPONSE_SCHEMA,
        )
        if not text:
            return []
        return PLAN_ADAPTER.validate_json(text)
