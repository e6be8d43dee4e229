"""Report synthesis for completed test runs."""

import copy
import hashlib
import json
from collections.abc import Sequence
from datetime import datetime, timezone

from qa_pilot.models.report import Defect, Severity, TestRunReport
from qa_pilot.models.run import TestCase

EVIDENCE_URL_TEMPLATE = "https://picsum.photos/400/300?random={index}"


def calculate_score(passed_count: int, total: int) -> int:
    """Return the integer health score, rounding halves up.

    A run with no cases scores 0.
    """
    if total == 0:
        return 0
    return (200 * passed_count + total) // (2 * total)


def defect_severity(position: int) -> Severity:
    """Alternate severity by position among the failed cases."""
    return "high" if position % 2 == 0 else "medium"


def build_defects(cases: Sequence[TestCase]) -> Sequence[Defect]:
    """Derive exactly one defect per failed case, in failure order."""
    failed = [case for case in cases if case.status == "fail"]
    return tuple(
        Defect(
            id=f"bug-{position}",
            severity=defect_severity(position),
            title=f"Assertion failed in {case.name}",
            description=(
                f"{case.name}: element expected to be visible "
                "but was obscured by modal overlay."
            ),
            location=f"{case.id}: {case.name}",
            evidence_url=EVIDENCE_URL_TEMPLATE.format(index=position),
        )
        for position, case in enumerate(failed)
    )


def derive_report_id(url: str, cases: Sequence[TestCase]) -> str:
    """Build a stable report id from the target and the case outcomes."""
    payload = json.dumps(
        [url, [[c.id, c.name, c.status, c.duration] for c in cases]],
        separators=(",", ":"),
    )
    return f"run-{hashlib.sha256(payload.encode()).hexdigest()[:12]}"


def synthesize(
    url: str,
    cases: Sequence[TestCase],
    *,
    run_id: str | None = None,
    now: datetime | None = None,
) -> TestRunReport:
    """Build the final report for a finished list of cases.

    The input cases are never mutated; calling this twice on the same cases
    yields reports that differ only in ``timestamp``.

    Args:
        url: Target URL of the run
        cases: Cases in execution order, expected to be terminal
        run_id: Report identifier (defaults to a digest of url and cases)
        now: Creation timestamp (defaults to the current UTC time)

    Returns:
        The scored report with derived defects

    """
    passed_count = sum(1 for case in cases if case.status == "pass")
    failed_count = sum(1 for case in cases if case.status == "fail")
    total_ms = sum(case.duration or 0 for case in cases)

    return TestRunReport(
        id=run_id if run_id is not None else derive_report_id(url, cases),
        url=url,
        timestamp=now if now is not None else datetime.now(timezone.utc),
        score=calculate_score(passed_count, len(cases)),
        passed_count=passed_count,
        failed_count=failed_count,
        duration=total_ms / 1000,
        cases=tuple(copy.deepcopy(case) for case in cases),
        defects=build_defects(cases),
    )


def summary_text(report: TestRunReport) -> str:
    """Render the short plain-text summary used when sharing a report."""
    return (
        f"Test Run Results for {report.url}\n"
        f"Score: {report.score}%\n"
        f"Passed: {report.passed_count}\n"
        f"Failed: {report.failed_count}\n"
        f"Defects: {len(report.defects)}"
    )
