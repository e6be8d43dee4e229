"""Models for the terminal artifact of a test run."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, TypeAlias

from qa_pilot.models.run import TestCase

Severity: TypeAlias = Literal["low", "medium", "high", "critical"]


@dataclass(frozen=True, kw_only=True)
class Defect:
    """Summary of one failed test case."""

    id: str
    severity: Severity
    title: str
    description: str
    location: str
    evidence_url: str | None = None


@dataclass(frozen=True, kw_only=True)
class TestRunReport:
    """Scored outcome of a completed run.

    ``duration`` is in seconds; the cases are a snapshot taken when the report
    was built and are not shared with the run that produced them.
    """

    __test__ = False

    id: str
    url: str
    timestamp: datetime
    score: int
    passed_count: int
    failed_count: int
    duration: float
    cases: Sequence[TestCase]
    defects: Sequence[Defect]
