"""Test run orchestrator driving a plan through simulated execution."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import Self, TypeAlias

from qa_pilot.models.report import TestRunReport
from qa_pilot.models.run import RunPhase, RunState, TestCase
from qa_pilot.planner import PlanGenerator
from qa_pilot.report import synthesize
from qa_pilot.simulator import RandomStepSimulator, StepSimulator, StepVerdict

log = logging.getLogger(__name__)

PLACEHOLDER_URL = "https://"

ReportCallback: TypeAlias = Callable[[TestRunReport], None]


class InvalidTargetError(ValueError):
    """Raised when a run is requested without a usable target URL."""


class RunInProgressError(RuntimeError):
    """Raised when starting a run while another one is active."""


class RunNotStartedError(RuntimeError):
    """Raised when waiting on an orchestrator that has no run."""


class RunCancelledError(RuntimeError):
    """Raised when waiting on a run that was torn down."""


def validate_target(url: str) -> str:
    """Return the stripped target URL or raise InvalidTargetError."""
    target = url.strip()
    if not target or target == PLACEHOLDER_URL:
        raise InvalidTargetError("Please enter a valid URL")
    return target


@dataclass(kw_only=True)
class RunOrchestrator:
    """Runs one test plan at a time, strictly case by case.

    The orchestrator owns a single asyncio task per run. Cancelling it, via
    ``cancel`` or by leaving an ``async with`` block, is the only teardown path
    and guarantees no event is emitted for the run afterwards.
    """

    planner: PlanGenerator
    simulator: StepSimulator = field(default_factory=RandomStepSimulator)
    tick_interval: float = 0.8
    planning_delay: float = 1.5
    plan_timeout: float | None = None
    on_complete: ReportCallback | None = None

    _state: RunState | None = field(default=None, init=False, repr=False)
    _task: asyncio.Task[TestRunReport] | None = field(
        default=None, init=False, repr=False
    )

    @property
    def state(self) -> RunState | None:
        return self._state

    @property
    def phase(self) -> RunPhase:
        return self._state.phase if self._state is not None else "idle"

    @property
    def active(self) -> bool:
        """Return True while a run task is pending."""
        return self._task is not None and not self._task.done()

    def start(self, url: str, description: str = "") -> RunState:
        """Validate the target and begin planning.

        Must be called from a running event loop. The returned state is live:
        it is updated as the run progresses.

        Raises:
            InvalidTargetError: If the URL is empty or the placeholder
            RunInProgressError: If a run is already active

        """
        target = validate_target(url)
        if self.active:
            raise RunInProgressError("A test run is already in progress")

        state = RunState(url=target, description=description, phase="planning")
        self._state = state
        self._task = asyncio.get_running_loop().create_task(
            self._drive(state), name=f"qa-pilot-{state.run_id}"
        )
        self._task.add_done_callback(_retrieve_exception)
        log.info("Started run %s for %s", state.run_id, target)
        return state

    async def wait(self) -> TestRunReport:
        """Wait for the current run and return its report.

        Raises:
            RunNotStartedError: If no run was started
            RunCancelledError: If the run was torn down before completing

        """
        task = self._task
        if task is None:
            raise RunNotStartedError("No test run has been started")

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                raise RunCancelledError("Test run was cancelled") from None
            raise

    async def execute(self, url: str, description: str = "") -> TestRunReport:
        """Start a run and wait for its report."""
        self.start(url, description)
        return await self.wait()

    async def cancel(self) -> None:
        """Tear down the current run, if any.

        Pending ticks are cancelled, the log sink is closed and the completion
        callback is never invoked for the torn-down run.
        """
        task, state = self._task, self._state
        try:
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    current = asyncio.current_task()
                    if current is not None and current.cancelling():
                        raise
                    log.info("Run %s cancelled", state.run_id if state else "?")
        finally:
            if state is not None:
                state.log.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.cancel()

    async def _drive(self, state: RunState) -> TestRunReport:
        try:
            await self._plan(state)

            state.phase = "running"
            state.current_index = 0
            while state.current_index < len(state.cases):
                await self._run_case(state, state.cases[state.current_index])
                state.current_index += 1
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Mid-run failures abort the whole run; the in-flight case keeps
            # its running status.
            state.phase = "failed"
            state.log.append(f"Run aborted: {e}")
            log.error("Run %s aborted: %s", state.run_id, e, exc_info=e)
            raise

        state.phase = "completed"
        state.log.append("Test run completed. Generating report...")
        report = synthesize(state.url, state.cases, run_id=state.run_id)
        log.info(
            "Run %s completed: score=%d passed=%d failed=%d",
            state.run_id,
            report.score,
            report.passed_count,
            report.failed_count,
        )

        if self.on_complete is not None:
            self.on_complete(report)
        return report

    async def _plan(self, state: RunState) -> None:
        state.log.append(f"Connecting to plan generator... analyzing {state.url}")
        await asyncio.sleep(self.planning_delay)

        plan = await self.planner.request_plan(
            state.url, state.description, timeout=self.plan_timeout
        )
        state.cases = tuple(
            TestCase(id=f"tc-{i}", name=item.name, description=item.description)
            for i, item in enumerate(plan)
        )
        state.log.append(f"Generated {len(state.cases)} test scenarios.")

    async def _run_case(self, state: RunState, case: TestCase) -> None:
        case.status = "running"
        state.log.append(f"STARTED: {case.name}", case_id=case.id)

        tick = 0
        while True:
            await asyncio.sleep(self.tick_interval)
            outcome = self.simulator.run_step(case, tick)
            tick += 1

            if isinstance(outcome, StepVerdict):
                case.status = "pass" if outcome.passed else "fail"
                case.duration = outcome.duration
                verdict = "PASSED" if outcome.passed else "FAILED"
                state.log.append(f"{verdict}: {case.name}", case_id=case.id)
                return

            case.logs.append(outcome.line)
            state.log.append(f"  > {outcome.line}", case_id=case.id)


def _retrieve_exception(task: asyncio.Task[TestRunReport]) -> None:
    # Marks an aborted run as observed; wait() still re-raises it.
    if not task.cancelled():
        task.exception()
