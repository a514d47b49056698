"""Data models for follow-up and retry submission."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

CONFIRMED_ACTION = "confirmed"


@dataclass(frozen=True)
class FollowUpRequest:
    """A new execution attempt for a session.

    Plain follow-ups leave ``retry_process_id`` and both retry options as
    None. Retries carry the process id and real booleans for both options.
    Build instances through :meth:`follow_up` or :meth:`retry` so that
    invariant holds.
    """

    prompt: str
    variant: str | None = None
    retry_process_id: str | None = None
    force_when_dirty: bool | None = None
    perform_git_reset: bool | None = None
    # Set by callers outside the workflows; always None when built here.
    working_dir: str | None = None
    env: dict[str, str] | None = None

    @classmethod
    def follow_up(cls, prompt: str, variant: str | None = None) -> FollowUpRequest:
        return cls(prompt=prompt, variant=variant)

    @classmethod
    def retry(
        cls,
        prompt: str,
        variant: str | None,
        process_id: str,
        force_when_dirty: bool | None = None,
        perform_git_reset: bool | None = None,
    ) -> FollowUpRequest:
        """Build a retry request, defaulting absent options.

        A dirty working tree blocks the retry unless explicitly forced, and
        the working tree is reset to the retried process's starting state
        unless explicitly declined.
        """
        return cls(
            prompt=prompt,
            variant=variant,
            retry_process_id=process_id,
            force_when_dirty=(
                False if force_when_dirty is None else force_when_dirty
            ),
            perform_git_reset=(
                True if perform_git_reset is None else perform_git_reset
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body for the sessions API."""
        return {
            "prompt": self.prompt,
            "variant": self.variant,
            "retry_process_id": self.retry_process_id,
            "force_when_dirty": self.force_when_dirty,
            "perform_git_reset": self.perform_git_reset,
            "working_dir": self.working_dir,
            "env": dict(self.env) if self.env is not None else None,
        }


@dataclass(frozen=True)
class ConfirmationResult:
    """The user's answer from a retry confirmation gate."""

    action: str
    force_when_dirty: bool | None = None
    perform_git_reset: bool | None = None

    @property
    def is_confirmed(self) -> bool:
        return self.action == CONFIRMED_ACTION

    @classmethod
    def confirmed(
        cls,
        force_when_dirty: bool | None = None,
        perform_git_reset: bool | None = None,
    ) -> ConfirmationResult:
        return cls(
            action=CONFIRMED_ACTION,
            force_when_dirty=force_when_dirty,
            perform_git_reset=perform_git_reset,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ConfirmationResult:
        """Parse a dialog payload (camelCase or snake_case keys)."""
        def _pick(camel: str, snake: str) -> bool | None:
            value = data.get(camel, data.get(snake))
            return value if isinstance(value, bool) else None

        return cls(
            action=str(data.get("action", "")),
            force_when_dirty=_pick("forceWhenDirty", "force_when_dirty"),
            perform_git_reset=_pick("performGitReset", "perform_git_reset"),
        )


@dataclass(frozen=True)
class RetryContext:
    """Read-only context handed to the confirmation gate.

    ``branch_status`` and ``processes`` are passed through untouched so the
    gate can pre-populate its own display.
    """

    execution_process_id: str
    branch_status: list[Any] | None = None
    processes: list[Any] | None = None


@dataclass(frozen=True)
class RetryParams:
    message: str
    variant: str | None
    execution_process_id: str
    branch_status: list[Any] | None = None
    processes: list[Any] | None = None

    def context(self) -> RetryContext:
        return RetryContext(
            execution_process_id=self.execution_process_id,
            branch_status=self.branch_status,
            processes=self.processes,
        )


@dataclass(frozen=True)
class Confirmed:
    """Gate decision authorizing the retry."""
    force_when_dirty: bool | None = None
    perform_git_reset: bool | None = None


@dataclass(frozen=True)
class Cancelled:
    """Gate decision ending the retry without submitting."""
    reason: str = "dismissed"


GateDecision = Confirmed | Cancelled


class RetryOutcome(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


@dataclass
class WorkflowState:
    """Mutable state owned by one follow-up editor surface."""
    is_sending: bool = False
    last_error: str | None = None
