"""Models for the mutable state of an in-flight test run."""

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from qa_pilot.log_sink import LogSink

CaseStatus: TypeAlias = Literal["pending", "running", "pass", "fail"]

RunPhase: TypeAlias = Literal["idle", "planning", "running", "completed", "failed"]

TERMINAL_STATUSES: frozenset[CaseStatus] = frozenset({"pass", "fail"})


@dataclass(kw_only=True)
class TestCase:
    """A single test scenario within a run.

    Only the run orchestrator mutates a case; ``duration`` (milliseconds) is
    set together with the terminal status.
    """

    __test__ = False

    id: str
    name: str
    description: str
    status: CaseStatus = "pending"
    duration: int | None = None
    logs: list[str] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        """Return True once the case has a pass or fail verdict."""
        return self.status in TERMINAL_STATUSES


@dataclass(kw_only=True)
class RunState:
    """State owned by one run, from plan request to report synthesis."""

    url: str
    description: str = ""
    run_id: str = field(default_factory=lambda: f"run-{uuid.uuid4().hex[:12]}")
    phase: RunPhase = "idle"
    cases: Sequence[TestCase] = ()
    current_index: int = -1
    log: LogSink = field(default_factory=LogSink, repr=False)

    @property
    def current_case(self) -> TestCase | None:
        """Return the case currently executing, if any."""
        if 0 <= self.current_index < len(self.cases):
            return self.cases[self.current_index]
        return None
