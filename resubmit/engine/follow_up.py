"""Plain follow-up submission for a session editor surface.

Composes the prompt from the editor's fragments, starts a new attempt on the
session, then clears the editor's transient inputs. Failures end up in
``last_error`` as a user-facing string and are never raised to the caller.
"""
from __future__ import annotations

import logging

from .config import CleanupCallback, SubmissionClient
from .models import FollowUpRequest, WorkflowState
from .prompt import PromptFragments

logger = logging.getLogger(__name__)

FOLLOW_UP_ERROR_PREFIX = "Failed to start follow-up execution"
UNKNOWN_ERROR = "Unknown error"


def _error_message(error: Exception) -> str | None:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or None


def format_follow_up_error(error: Exception) -> str:
    return f"{FOLLOW_UP_ERROR_PREFIX}: {_error_message(error) or UNKNOWN_ERROR}"


class FollowUpWorkflow:
    """Send follow-up prompts and track in-flight/error state.

    One instance lives as long as the editor surface that owns it. The
    editor is expected to disable its send trigger while :attr:`is_sending`
    is True; overlapping calls are not rejected here.
    """

    def __init__(
        self,
        client: SubmissionClient,
        *,
        clear_comments: CleanupCallback,
        on_after_send_cleanup: CleanupCallback,
        clear_clicked_elements: CleanupCallback | None = None,
    ) -> None:
        self._client = client
        self._clear_comments = clear_comments
        self._clear_clicked_elements = clear_clicked_elements
        self._on_after_send_cleanup = on_after_send_cleanup
        self._state = WorkflowState()

    @property
    def is_sending(self) -> bool:
        return self._state.is_sending

    @property
    def last_error(self) -> str | None:
        return self._state.last_error

    def set_error(self, message: str | None) -> None:
        """Replace the error banner text (None hides it)."""
        self._state.last_error = message

    def clear_error(self) -> None:
        self._state.last_error = None

    async def send(
        self,
        session_id: str | None,
        *,
        message: str,
        conflict_markdown: str | None = None,
        clicked_markdown: str | None = None,
        review_markdown: str | None = None,
        variant: str | None = None,
    ) -> bool:
        """Submit a follow-up attempt.

        Returns True when the attempt was accepted. Returns False without
        touching any state when there is no session or nothing to send, and
        False with :attr:`last_error` set when the submission failed.

        Focus stays on the editor after a successful send; no log view is
        brought forward.
        """
        if not session_id:
            return False
        prompt = PromptFragments(
            conflict=conflict_markdown,
            clicked=clicked_markdown,
            review=review_markdown,
            message=message,
        ).compose()
        if not prompt:
            logger.debug("Follow-up skipped session=%s: empty prompt", session_id[:8])
            return False

        try:
            self._state.is_sending = True
            self._state.last_error = None
            request = FollowUpRequest.follow_up(prompt, variant)
            logger.info(
                "Sending follow-up session=%s prompt_len=%d variant=%s",
                session_id[:8], len(prompt), variant,
            )
            await self._client.follow_up(session_id, request)
            self._clear_comments()
            if self._clear_clicked_elements is not None:
                self._clear_clicked_elements()
            self._on_after_send_cleanup()
            return True
        except Exception as exc:
            logger.warning(
                "Follow-up failed session=%s: %s", session_id[:8], exc,
                exc_info=True,
            )
            self._state.last_error = format_follow_up_error(exc)
            return False
        finally:
            self._state.is_sending = False
