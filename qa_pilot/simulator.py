"""Step-by-step execution of a single test case."""

import random
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TypeAlias

from qa_pilot.models.run import TestCase

SIMULATED_ACTIONS: Sequence[str] = (
    "Locating element via XPath...",
    "Waiting for network idle...",
    "Simulating click event...",
    "Verifying computed styles...",
    "Checking console for errors...",
    "Taking screenshot...",
)


@dataclass(frozen=True, kw_only=True)
class StepProgress:
    """An intermediate, human-readable progress line."""

    line: str


@dataclass(frozen=True, kw_only=True)
class StepVerdict:
    """Terminal outcome of a case with its duration in milliseconds."""

    passed: bool
    duration: int


StepOutcome: TypeAlias = StepProgress | StepVerdict


class StepSimulator(ABC):
    """Capability that executes a test case one tick at a time.

    The orchestrator calls ``run_step`` with increasing ``tick`` values
    starting at 0 until a ``StepVerdict`` is returned.
    """

    @abstractmethod
    def run_step(self, case: TestCase, tick: int) -> StepOutcome:
        """Advance the case by one tick."""


@dataclass(kw_only=True)
class RandomStepSimulator(StepSimulator):
    """Stand-in tester producing random actions and random verdicts.

    Progress lines come from their own random source so that they never
    influence the verdict.
    """

    steps: int = 5
    pass_probability: float = 0.8
    min_duration: int = 500
    max_duration: int = 2500
    verdict_rng: random.Random = field(default_factory=random.Random, repr=False)
    action_rng: random.Random = field(default_factory=random.Random, repr=False)

    @classmethod
    def seeded(cls, seed: int) -> "RandomStepSimulator":
        """Create a reproducible simulator."""
        return cls(verdict_rng=random.Random(seed), action_rng=random.Random(seed + 1))

    def run_step(self, case: TestCase, tick: int) -> StepOutcome:
        if tick < self.steps:
            return StepProgress(line=self.action_rng.choice(SIMULATED_ACTIONS))

        return StepVerdict(
            passed=self.verdict_rng.random() < self.pass_probability,
            duration=self.verdict_rng.randrange(self.min_duration, self.max_duration),
        )
