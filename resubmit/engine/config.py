"""Configuration loaded from environment variables.

All settings have sensible defaults. Override via RESUBMIT_* env vars.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

from .models import ConfirmationResult, FollowUpRequest, RetryContext

logger = logging.getLogger(__name__)


# Async confirmation gate consulted before every retry.
# Signature: async def gate(context: RetryContext) -> ConfirmationResult | None
# Returning None, raising, or any action other than "confirmed" cancels.
ConfirmationGate = Callable[[RetryContext], Awaitable[ConfirmationResult | None]]

# Synchronous caller-supplied hooks. Called once, never awaited.
CleanupCallback = Callable[[], None]
ErrorCallback = Callable[[Exception], None]


class SubmissionClient(Protocol):
    """Anything that can start a new attempt on a session."""

    async def follow_up(self, session_id: str, request: FollowUpRequest) -> Any:
        """Submit ``request``; raise on transport or application failure."""


@dataclass
class ClientConfig:
    """Sessions API client configuration."""

    base_url: str = "http://127.0.0.1:8080"
    # Transport timeout for a single submission.
    # Set to 0 (or a negative value) to disable timeout.
    request_timeout_seconds: float = 30.0
    log_level: str = "INFO"
    # Defaults to ~/.resubmit/preferences.json when unset.
    preferences_path: str | None = None

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Load configuration from RESUBMIT_* environment variables."""
        overrides = {
            k: v for k, v in os.environ.items() if k.startswith("RESUBMIT_")
        }
        if overrides:
            logger.info(
                "ClientConfig.from_env: RESUBMIT_* env overrides: %s",
                ", ".join(f"{k}={v}" for k, v in sorted(overrides.items())),
            )
        else:
            logger.debug("ClientConfig.from_env: no RESUBMIT_* env vars set, using defaults")

        config = cls(
            base_url=os.getenv("RESUBMIT_BASE_URL", cls.base_url),
            request_timeout_seconds=float(os.getenv(
                "RESUBMIT_TIMEOUT", str(cls.request_timeout_seconds)
            )),
            log_level=os.getenv("RESUBMIT_LOG_LEVEL", cls.log_level),
            preferences_path=os.getenv("RESUBMIT_PREFERENCES_PATH") or None,
        )
        logger.debug(
            "ClientConfig.from_env: base_url=%s timeout=%s log_level=%s",
            config.base_url, config.request_timeout_seconds, config.log_level,
        )
        return config
