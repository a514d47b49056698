"""HTTP client for the sessions API.

Only the follow-up endpoint is used here:

    POST /api/sessions/{session_id}/follow-up

The server answers with an envelope of the form
``{"success": bool, "data": ..., "message": str | null}``.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from resubmit.engine.config import ClientConfig
from resubmit.engine.errors import SubmissionError
from resubmit.engine.models import FollowUpRequest

logger = logging.getLogger(__name__)


class SessionsApi:
    """aiohttp-backed :class:`~resubmit.engine.config.SubmissionClient`."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(
            total=timeout_seconds if timeout_seconds > 0 else None
        )
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: ClientConfig) -> SessionsApi:
        return cls(config.base_url, timeout_seconds=config.request_timeout_seconds)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> SessionsApi:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def follow_up(self, session_id: str, request: FollowUpRequest) -> Any:
        """Start a new attempt on ``session_id``.

        Returns the envelope's ``data``. Raises :class:`SubmissionError` on
        HTTP errors, ``success: false`` envelopes, and transport failures.
        """
        if not session_id:
            raise ValueError("session_id must be a non-empty string")

        url = f"{self._base_url}/api/sessions/{quote(session_id, safe='')}/follow-up"
        logger.debug(
            "POST %s retry_process_id=%s", url, request.retry_process_id,
        )
        try:
            async with self._get_session().post(
                url, json=request.to_payload(), timeout=self._timeout,
            ) as resp:
                status = resp.status
                try:
                    body = await resp.json(content_type=None)
                except ValueError:
                    body = None
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning(
                "Follow-up request to session=%s failed: %s", session_id[:8], exc,
            )
            raise SubmissionError(
                session_id, str(exc) or type(exc).__name__,
            ) from exc

        envelope = body if isinstance(body, dict) else {}
        if status >= 400 or envelope.get("success") is False:
            message = envelope.get("message")
            if not isinstance(message, str) or not message:
                message = f"Request failed with status {status}"
            logger.info(
                "Follow-up rejected session=%s status=%d message=%s",
                session_id[:8], status, message,
            )
            raise SubmissionError(session_id, message, status=status)

        return envelope.get("data")
