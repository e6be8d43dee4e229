"""Models for generated test plans."""

from collections.abc import Sequence

from pydantic import Field, TypeAdapter

from qa_pilot.models.base import Model


class PlanItem(Model):
    """A single test-case descriptor produced by a plan generator."""

    name: str = Field(..., description="Short title of the test case")
    description: str = Field(
        ..., description="One sentence explanation of what is being tested"
    )


PLAN_ADAPTER: TypeAdapter[Sequence[PlanItem]] = TypeAdapter(Sequence[PlanItem])
