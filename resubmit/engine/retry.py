"""Retry a previous execution process with a new prompt.

Flow:
1. Ask the confirmation gate (the restore-logs dialog) for permission and
   for the destructive options.
2. On confirmation, submit a retry attempt for the chosen process.
3. Report through ``on_success`` / ``on_error``.

Dismissing the gate ends the retry quietly: nothing is submitted and
``on_error`` is not called.
"""
from __future__ import annotations

import logging

from .config import (
    CleanupCallback,
    ConfirmationGate,
    ErrorCallback,
    SubmissionClient,
)
from .models import (
    Cancelled,
    Confirmed,
    FollowUpRequest,
    GateDecision,
    RetryContext,
    RetryOutcome,
    RetryParams,
)

logger = logging.getLogger(__name__)


async def ask_confirmation(
    confirm: ConfirmationGate, context: RetryContext,
) -> GateDecision:
    """Consult ``confirm`` and reduce its answer to a decision.

    A gate that raises, returns None, or returns any action other than
    ``"confirmed"`` yields :class:`Cancelled`.
    """
    try:
        result = await confirm(context)
    except Exception as exc:
        logger.info(
            "Retry confirmation aborted process=%s: %s",
            context.execution_process_id[:8], exc,
        )
        return Cancelled(reason="aborted")
    if result is None or not result.is_confirmed:
        return Cancelled(reason=result.action if result else "dismissed")
    return Confirmed(
        force_when_dirty=result.force_when_dirty,
        perform_git_reset=result.perform_git_reset,
    )


class RetryWorkflow:
    """Retry processes of one session.

    Every :meth:`retry` call owns its own gate and submit cycle; overlapping
    calls are neither coalesced nor deduplicated.
    """

    def __init__(
        self,
        client: SubmissionClient,
        session_id: str,
        confirm: ConfirmationGate,
        *,
        on_success: CleanupCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._client = client
        self._session_id = session_id
        self._confirm = confirm
        self._on_success = on_success
        self._on_error = on_error
        self._in_flight = 0

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def is_pending(self) -> bool:
        """True while a confirmed retry is being submitted."""
        return self._in_flight > 0

    async def retry(self, params: RetryParams) -> RetryOutcome:
        process_id = params.execution_process_id
        if not params.message.strip():
            logger.debug("Retry skipped process=%s: empty message", process_id[:8])
            return RetryOutcome.SKIPPED

        decision = await ask_confirmation(self._confirm, params.context())
        if isinstance(decision, Cancelled):
            logger.info(
                "Retry cancelled session=%s process=%s reason=%s",
                self._session_id[:8], process_id[:8], decision.reason,
            )
            return RetryOutcome.CANCELLED

        request = FollowUpRequest.retry(
            params.message,
            params.variant,
            process_id,
            force_when_dirty=decision.force_when_dirty,
            perform_git_reset=decision.perform_git_reset,
        )
        self._in_flight += 1
        try:
            logger.info(
                "Sending retry session=%s process=%s reset=%s force=%s",
                self._session_id[:8], process_id[:8],
                request.perform_git_reset, request.force_when_dirty,
            )
            await self._client.follow_up(self._session_id, request)
            if self._on_success is not None:
                self._on_success()
            return RetryOutcome.SUCCEEDED
        except Exception as exc:
            logger.error("Failed to send retry: %s", exc, exc_info=True)
            if self._on_error is not None:
                self._on_error(exc)
            return RetryOutcome.FAILED
        finally:
            self._in_flight -= 1
