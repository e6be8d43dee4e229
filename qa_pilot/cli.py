"""CLI entry point for the autonomous QA agent."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from qa_pilot.assistant import ChatAssistant, ChatTurn
from qa_pilot.auth import AuthClient, AuthConfig, AuthError
from qa_pilot.gemini import GeminiClient, GeminiConfig
from qa_pilot.log_sink import LogEntry
from qa_pilot.models.report import TestRunReport
from qa_pilot.orchestrator import InvalidTargetError, RunOrchestrator
from qa_pilot.planner import GeminiPlanGenerator
from qa_pilot.report import summary_text

STATUS_SYMBOLS = {
    "pass": "✅",
    "fail": "❌",
    "running": "⏳",
    "pending": "·",
}


def log_results_summary(
    log: logging.Logger,
    report: TestRunReport,
    analyses: Mapping[str, str] | None = None,
) -> None:
    """Log a formatted summary of the run with defect details."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for case in report.cases:
        symbol = STATUS_SYMBOLS.get(case.status, "?")
        log.info(
            "%s %s: %s (%.2fs)",
            symbol,
            case.name,
            case.status,
            (case.duration or 0) / 1000,
        )
        if analyses and case.id in analyses:
            log.info("  Root cause: %s", analyses[case.id])

    for defect in report.defects:
        log.info(
            "  [%s] %s (%s)", defect.severity.upper(), defect.title, defect.location
        )

    for line in summary_text(report).splitlines():
        log.info(line)


def format_output(
    report: TestRunReport, analyses: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Format a report for JSON output."""
    return {
        "id": report.id,
        "url": report.url,
        "timestamp": report.timestamp.isoformat(),
        "score": report.score,
        "passed": report.passed_count,
        "failed": report.failed_count,
        "duration": report.duration,
        "cases": [
            {
                "id": case.id,
                "name": case.name,
                "description": case.description,
                "status": case.status,
                "duration": case.duration,
                "logs": list(case.logs),
                "analysis": (analyses or {}).get(case.id),
            }
            for case in report.cases
        ],
        "defects": [
            {
                "id": defect.id,
                "severity": defect.severity,
                "title": defect.title,
                "description": defect.description,
                "location": defect.location,
                "evidence_url": defect.evidence_url,
            }
            for defect in report.defects
        ],
    }


async def analyze_failures(
    assistant: ChatAssistant, report: TestRunReport
) -> Mapping[str, str]:
    """Ask the assistant for a root cause of every failed case."""
    failed = [case for case in report.cases if case.status == "fail"]
    analyses = await asyncio.gather(
        *(assistant.analyze_defect(case.name, case.logs) for case in failed)
    )
    return {case.id: analysis for case, analysis in zip(failed, analyses, strict=True)}


async def run(
    url: str,
    description: str,
    gemini_config_json: str,
    tick_interval: float = 0.8,
    planning_delay: float = 1.5,
    plan_timeout: float | None = None,
    analyze_defects: bool = False,
) -> int:
    """Run a test plan against the target and return exit code."""
    log = logging.getLogger("qa_pilot")
    config = GeminiConfig(**json.loads(gemini_config_json))

    async with GeminiClient.from_config(config) as client:
        orchestrator = RunOrchestrator(
            planner=GeminiPlanGenerator(client=client),
            tick_interval=tick_interval,
            planning_delay=planning_delay,
            plan_timeout=plan_timeout,
        )
        async with orchestrator:
            try:
                state = orchestrator.start(url, description)
            except InvalidTargetError as e:
                log.error("%s: %r", e, url)
                return 2

            state.log.subscribe(lambda entry: _echo(log, entry))
            report = await orchestrator.wait()

        analyses: Mapping[str, str] = {}
        if analyze_defects and report.failed_count:
            log.info("Analyzing %d failed case(s)...", report.failed_count)
            analyses = await analyze_failures(ChatAssistant(client=client), report)

    log_results_summary(log, report, analyses)
    print(json.dumps(format_output(report, analyses), indent=2))

    return 1 if report.failed_count else 0


async def chat(gemini_config_json: str, lines: Sequence[str]) -> int:
    """Answer each input line, keeping the conversation history."""
    config = GeminiConfig(**json.loads(gemini_config_json))
    history: list[ChatTurn] = []

    async with GeminiClient.from_config(config) as client:
        assistant = ChatAssistant(client=client)
        for line in lines:
            message = line.strip()
            if not message:
                continue
            answer = await assistant.reply(history, message)
            history.append(ChatTurn(role="user", text=message))
            history.append(ChatTurn(role="model", text=answer))
            print(answer, flush=True)

    return 0


async def sign_in(
    auth_config_json: str,
    email: str,
    password: str,
    name: str | None = None,
) -> int:
    """Register when a name is given, otherwise log in; print the user."""
    log = logging.getLogger("qa_pilot")
    config = AuthConfig(**json.loads(auth_config_json))

    async with AuthClient.from_config(config) as client:
        try:
            if name is not None:
                user = await client.register(name, email, password)
            else:
                user = await client.authenticate(email, password)
        except AuthError as e:
            log.error("Authentication rejected (%d): %s", e.status, e)
            return 1

    print(user.model_dump_json())
    return 0


def _echo(log: logging.Logger, entry: LogEntry) -> None:
    log.info("%s", entry.text)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Autonomous QA agent")
    parser.add_argument(
        "--gemini-config",
        default="{}",
        help='JSON configuration for the Gemini client (e.g. {"api_key": "..."})',
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Plan and run tests for a URL")
    run_parser.add_argument("--url", required=True, help="Target URL")
    run_parser.add_argument(
        "--description",
        default="",
        help="Context for the planner (e.g. 'e-commerce site, focus on checkout')",
    )
    run_parser.add_argument(
        "--tick-interval",
        type=float,
        default=0.8,
        help="Seconds between simulated steps",
    )
    run_parser.add_argument(
        "--planning-delay",
        type=float,
        default=1.5,
        help="Seconds to wait before requesting the plan",
    )
    run_parser.add_argument(
        "--plan-timeout",
        type=float,
        default=None,
        help="Seconds to wait for the planner before using the fallback plan",
    )
    run_parser.add_argument(
        "--analyze-defects",
        action="store_true",
        help="Ask the assistant for a root cause of each failed case",
    )

    subparsers.add_parser("chat", help="Ask the assistant questions from stdin")

    for command, help_text in (
        ("login", "Log in to the authentication backend"),
        ("register", "Create an account on the authentication backend"),
    ):
        auth_parser = subparsers.add_parser(command, help=help_text)
        auth_parser.add_argument(
            "--auth-config",
            default="{}",
            help="JSON configuration for the auth client",
        )
        auth_parser.add_argument("--email", required=True, help="Account email")
        auth_parser.add_argument("--password", required=True, help="Account password")
        if command == "register":
            auth_parser.add_argument("--name", required=True, help="Display name")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.command == "run":
        exit_code = asyncio.run(
            run(
                url=args.url,
                description=args.description,
                gemini_config_json=args.gemini_config,
                tick_interval=args.tick_interval,
                planning_delay=args.planning_delay,
                plan_timeout=args.plan_timeout,
                analyze_defects=args.analyze_defects,
            )
        )
    elif args.command == "chat":
        exit_code = asyncio.run(chat(args.gemini_config, sys.stdin.readlines()))
    else:
        exit_code = asyncio.run(
            sign_in(
                auth_config_json=args.auth_config,
                email=args.email,
                password=args.password,
                name=getattr(args, "name", None),
            )
        )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
