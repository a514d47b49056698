"""Adapters package - Bridge between the workflows and their collaborators.

Contains the sessions API client and the confirmation gates that connect
the submission workflows to a server and to a user.
"""
from __future__ import annotations

__all__ = [
    "SessionsApi",
    "PendingConfirmationGate",
    "PreferenceConfirmationGate",
    "TerminalConfirmationGate",
]

from resubmit.adapters.sessions_api import SessionsApi
from resubmit.adapters.confirmation import (
    PendingConfirmationGate,
    PreferenceConfirmationGate,
    TerminalConfirmationGate,
)
