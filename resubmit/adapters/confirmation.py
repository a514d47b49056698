"""Confirmation gates for the retry workflow.

A gate is any async callable taking a :class:`RetryContext` and returning
a :class:`ConfirmationResult` (or None when dismissed). The gates here
cover the common front ends:

- :class:`PendingConfirmationGate` parks the request on a Future that a UI
  resolves later, by request id.
- :class:`PreferenceConfirmationGate` answers from saved preferences and
  only asks when the user chose "ask".
- :class:`TerminalConfirmationGate` asks on stdin for the command line.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from resubmit.engine.config import ConfirmationGate
from resubmit.engine.models import ConfirmationResult, RetryContext
from resubmit.shared.services.preferences import UserPreferences

logger = logging.getLogger(__name__)

# Called when a confirmation is waiting for the user.
# Signature: def on_request(request_id: str, context: RetryContext) -> None
ConfirmationRequestCallback = Callable[[str, RetryContext], None]


class PendingConfirmationGate:
    """Future-backed gate resolved by the UI.

    ``show`` creates a Future, announces it through ``on_request`` and
    waits until :meth:`resolve` or :meth:`dismiss` is called with the same
    request id.
    """

    def __init__(
        self,
        on_request: ConfirmationRequestCallback | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._on_request = on_request
        self._timeout = timeout_seconds
        self._futures: dict[str, asyncio.Future[ConfirmationResult | None]] = {}

    @property
    def pending(self) -> list[str]:
        return list(self._futures)

    async def show(self, context: RetryContext) -> ConfirmationResult | None:
        request_id = str(uuid.uuid4())
        loop = asyncio.get_running_loop()
        future: asyncio.Future[ConfirmationResult | None] = loop.create_future()
        self._futures[request_id] = future
        logger.info(
            "Retry confirmation queued request_id=%s process=%s",
            request_id[:8], context.execution_process_id[:8],
        )
        try:
            if self._on_request is not None:
                self._on_request(request_id, context)
            if self._timeout is not None and self._timeout > 0:
                return await asyncio.wait_for(future, timeout=self._timeout)
            return await future
        finally:
            self._futures.pop(request_id, None)

    async def __call__(self, context: RetryContext) -> ConfirmationResult | None:
        return await self.show(context)

    def resolve(
        self,
        request_id: str,
        result: ConfirmationResult | Mapping[str, Any] | None,
    ) -> None:
        """Settle a pending confirmation from the UI.

        ``result`` may be a raw dialog payload such as
        ``{"action": "confirmed", "performGitReset": false}``.
        """
        if isinstance(result, Mapping):
            result = ConfirmationResult.from_dict(result)
        future = self._futures.get(request_id)
        if future and not future.done():
            future.set_result(result)
            logger.info(
                "Retry confirmation resolved request_id=%s action=%s",
                request_id[:8], result.action if result else None,
            )
        else:
            logger.warning(
                "Retry confirmation resolve ignored request_id=%s (missing or already done)",
                request_id[:8],
            )

    def dismiss(self, request_id: str) -> None:
        self.resolve(request_id, None)


class PreferenceConfirmationGate:
    """Skip the dialog when the user saved a standing answer.

    Options passed explicitly for this retry (``force_when_dirty`` and
    ``perform_git_reset``) win over the saved values.
    """

    def __init__(
        self,
        inner: ConfirmationGate,
        preferences: UserPreferences,
        *,
        force_when_dirty: bool | None = None,
        perform_git_reset: bool | None = None,
    ) -> None:
        self._inner = inner
        self._preferences = preferences
        self._force_when_dirty = force_when_dirty
        self._perform_git_reset = perform_git_reset

    async def __call__(self, context: RetryContext) -> ConfirmationResult | None:
        choice = self._preferences.git_reset_on_retry
        if choice not in ("always", "never"):
            return await self._inner(context)

        perform_git_reset = self._perform_git_reset
        if perform_git_reset is None:
            perform_git_reset = choice == "always"
        force_when_dirty = self._force_when_dirty
        if force_when_dirty is None:
            force_when_dirty = self._preferences.force_when_dirty
        logger.debug(
            "Retry confirmation answered from preferences choice=%s reset=%s force=%s",
            choice, perform_git_reset, force_when_dirty,
        )
        return ConfirmationResult.confirmed(
            force_when_dirty=force_when_dirty,
            perform_git_reset=perform_git_reset,
        )


def _is_yes(answer: str, default: bool) -> bool:
    answer = answer.strip().lower()
    if not answer:
        return default
    return answer in {"y", "yes"}


class TerminalConfirmationGate:
    """Ask on the terminal before retrying."""

    def __init__(
        self,
        *,
        assume_yes: bool = False,
        force_when_dirty: bool | None = None,
        perform_git_reset: bool | None = None,
        input_fn: Callable[[str], str] | None = None,
    ) -> None:
        self._assume_yes = assume_yes
        self._force_when_dirty = force_when_dirty
        self._perform_git_reset = perform_git_reset
        self._input = input_fn or input

    async def _ask(self, question: str) -> str:
        return await asyncio.to_thread(self._input, question)

    async def __call__(self, context: RetryContext) -> ConfirmationResult | None:
        if self._assume_yes:
            return ConfirmationResult.confirmed(
                force_when_dirty=self._force_when_dirty,
                perform_git_reset=self._perform_git_reset,
            )

        process_count = len(context.processes or [])
        try:
            answer = await self._ask(
                f"Retry from process {context.execution_process_id}? "
                "Later logs will be discarded "
                f"({process_count} known processes). [y/N] "
            )
            if not _is_yes(answer, default=False):
                return ConfirmationResult(action="cancelled")

            perform_git_reset = self._perform_git_reset
            if perform_git_reset is None:
                perform_git_reset = _is_yes(
                    await self._ask("Reset the working tree to that process's start? [Y/n] "),
                    default=True,
                )
            force_when_dirty = self._force_when_dirty
            if force_when_dirty is None:
                force_when_dirty = _is_yes(
                    await self._ask("Proceed even with uncommitted changes? [y/N] "),
                    default=False,
                )
        except (EOFError, KeyboardInterrupt):
            return None

        return ConfirmationResult.confirmed(
            force_when_dirty=force_when_dirty,
            perform_git_reset=perform_git_reset,
        )
