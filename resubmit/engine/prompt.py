"""Prompt composition for follow-up messages.

The follow-up editor gathers text from several places (merge conflict
context, clicked preview elements, review comments, and what the user
typed). They are merged into a single prompt, blank line separated, in a
fixed order. Empty pieces are dropped entirely.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

FRAGMENT_SEPARATOR = "\n\n"


def compose_prompt(fragments: Iterable[str | None]) -> str:
    """Join non-empty fragments in order.

    Every fragment is trimmed; None and fragments that are empty after
    trimming are skipped. Returns ``""`` when nothing survives, which
    callers treat as nothing to send.
    """
    parts: list[str] = []
    for fragment in fragments:
        if not fragment:
            continue
        stripped = fragment.strip()
        if stripped:
            parts.append(stripped)
    return FRAGMENT_SEPARATOR.join(parts)


@dataclass(frozen=True)
class PromptFragments:
    """The editor's prompt sources, in submission order."""

    conflict: str | None = None
    clicked: str | None = None
    review: str | None = None
    message: str | None = None

    def compose(self) -> str:
        return compose_prompt(
            (self.conflict, self.clicked, self.review, self.message)
        )
