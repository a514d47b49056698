"""CLI entry point for follow-up and retry submission.

Usage:
    resubmit follow-up SESSION_ID "Also cover the error path"
    resubmit follow-up SESSION_ID --review-file review.md
    resubmit retry SESSION_ID PROCESS_ID "Try again with smaller steps"
    resubmit --base-url http://127.0.0.1:8080 retry SESSION_ID PROCESS_ID "..." --yes
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from resubmit.adapters.confirmation import (
    PreferenceConfirmationGate,
    TerminalConfirmationGate,
)
from resubmit.adapters.sessions_api import SessionsApi
from resubmit.engine.config import ClientConfig
from resubmit.engine.follow_up import FollowUpWorkflow
from resubmit.engine.models import RetryOutcome, RetryParams
from resubmit.engine.retry import RetryWorkflow
from resubmit.shared.services.preferences import UserPreferences

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resubmit",
        description="Send follow-up prompts or retry processes on a session",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Sessions API base URL (default: from config)",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="YAML config file with a 'client' section",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    follow_up = sub.add_parser("follow-up", help="Send a follow-up prompt")
    follow_up.add_argument("session_id")
    follow_up.add_argument(
        "message", nargs="?", default="",
        help="Free-typed message (appended last)",
    )
    follow_up.add_argument("--variant", default=None)
    follow_up.add_argument(
        "--conflict-file", default=None,
        help="Merge conflict context (sent first)",
    )
    follow_up.add_argument(
        "--clicked-file", default=None,
        help="Clicked preview element context",
    )
    follow_up.add_argument(
        "--review-file", default=None,
        help="Review comments",
    )

    retry = sub.add_parser("retry", help="Retry an execution process")
    retry.add_argument("session_id")
    retry.add_argument("process_id")
    retry.add_argument("message")
    retry.add_argument("--variant", default=None)
    retry.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Skip the confirmation prompt",
    )
    retry.add_argument(
        "--force",
        action="store_true",
        default=None,
        help="Proceed even with uncommitted changes",
    )
    retry.add_argument(
        "--no-reset",
        dest="perform_git_reset",
        action="store_false",
        default=None,
        help="Keep the current working tree",
    )
    return parser


def _load_config(args: argparse.Namespace) -> ClientConfig:
    if args.config:
        from resubmit.engine.yaml_config import load_yaml_config
        config = load_yaml_config(args.config)
    else:
        config = ClientConfig.from_env()
    if args.base_url is not None:
        config.base_url = args.base_url
    if args.timeout is not None:
        config.request_timeout_seconds = args.timeout
    return config


def _read_optional(file_path: str | None) -> str | None:
    if not file_path:
        return None
    p = Path(file_path)
    if not p.is_file():
        print(f"Error: File not found: {file_path}")
        sys.exit(2)
    return p.read_text(encoding="utf-8")


async def _run_follow_up(args: argparse.Namespace, config: ClientConfig) -> int:
    async with SessionsApi.from_config(config) as api:
        workflow = FollowUpWorkflow(
            api,
            clear_comments=lambda: logger.debug("Review comments consumed"),
            on_after_send_cleanup=lambda: print("Follow-up started."),
        )
        sent = await workflow.send(
            args.session_id,
            message=args.message,
            conflict_markdown=args.conflict,
            clicked_markdown=args.clicked,
            review_markdown=args.review,
            variant=args.variant,
        )
    if sent:
        return 0
    if workflow.last_error:
        print(workflow.last_error, file=sys.stderr)
        return 1
    print("Nothing to send.")
    return 0


async def _run_retry(args: argparse.Namespace, config: ClientConfig) -> int:
    prefs_path = Path(config.preferences_path).expanduser() if config.preferences_path else None
    preferences = UserPreferences.load(prefs_path)
    gate = TerminalConfirmationGate(
        assume_yes=args.yes,
        force_when_dirty=args.force,
        perform_git_reset=args.perform_git_reset,
    )
    if not args.yes:
        gate = PreferenceConfirmationGate(
            gate,
            preferences,
            force_when_dirty=args.force,
            perform_git_reset=args.perform_git_reset,
        )

    errors: list[Exception] = []
    async with SessionsApi.from_config(config) as api:
        workflow = RetryWorkflow(
            api,
            args.session_id,
            gate,
            on_success=lambda: print("Retry started."),
            on_error=errors.append,
        )
        outcome = await workflow.retry(RetryParams(
            message=args.message,
            variant=args.variant,
            execution_process_id=args.process_id,
        ))

    if outcome is RetryOutcome.CANCELLED:
        print("Retry cancelled.")
    elif outcome is RetryOutcome.SKIPPED:
        print("Nothing to send.")
    elif outcome is RetryOutcome.FAILED:
        print(f"Failed to send retry: {errors[-1] if errors else 'Unknown error'}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )

    config = _load_config(args)
    if not args.verbose:
        logging.getLogger().setLevel(
            getattr(logging, (config.log_level or "INFO").upper(), logging.INFO)
        )

    if args.command == "follow-up":
        args.conflict = _read_optional(args.conflict_file)
        args.clicked = _read_optional(args.clicked_file)
        args.review = _read_optional(args.review_file)
        runner = _run_follow_up
    else:
        runner = _run_retry
    try:
        code = asyncio.run(runner(args, config))
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
