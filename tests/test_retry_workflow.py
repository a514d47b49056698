"""Tests for RetryWorkflow confirmation, defaults and error reporting."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from resubmit.engine.errors import SubmissionError
from resubmit.engine.models import (
    Cancelled,
    ConfirmationResult,
    Confirmed,
    RetryContext,
    RetryOutcome,
    RetryParams,
)
from resubmit.engine.retry import RetryWorkflow, ask_confirmation


def _params(**overrides) -> RetryParams:
    values = dict(
        message="Try again, smaller steps",
        variant="DEFAULT",
        execution_process_id="proc-1234567890",
        branch_status=[{"repo": "main", "ahead": 1}],
        processes=[{"id": "proc-1234567890"}],
    )
    values.update(overrides)
    return RetryParams(**values)


def _make_workflow(gate, client=None):
    if client is None:
        client = MagicMock()
        client.follow_up = AsyncMock(return_value=None)
    on_success = MagicMock()
    on_error = MagicMock()
    workflow = RetryWorkflow(
        client,
        "session-1",
        gate,
        on_success=on_success,
        on_error=on_error,
    )
    return workflow, client, on_success, on_error


# ── Confirmation gate ──


class TestAskConfirmation:

    @pytest.mark.asyncio
    async def test_confirmed_result_carries_options(self):
        gate = AsyncMock(return_value=ConfirmationResult.confirmed(
            force_when_dirty=True, perform_git_reset=False,
        ))
        decision = await ask_confirmation(gate, RetryContext("p1"))
        assert decision == Confirmed(force_when_dirty=True, perform_git_reset=False)

    @pytest.mark.asyncio
    async def test_other_action_is_cancelled(self):
        gate = AsyncMock(return_value=ConfirmationResult(action="dismissed"))
        decision = await ask_confirmation(gate, RetryContext("p1"))
        assert decision == Cancelled(reason="dismissed")

    @pytest.mark.asyncio
    async def test_none_is_cancelled(self):
        gate = AsyncMock(return_value=None)
        assert isinstance(await ask_confirmation(gate, RetryContext("p1")), Cancelled)

    @pytest.mark.asyncio
    async def test_raising_gate_is_cancelled(self):
        gate = AsyncMock(side_effect=RuntimeError("dialog closed"))
        decision = await ask_confirmation(gate, RetryContext("p1"))
        assert decision == Cancelled(reason="aborted")


@pytest.mark.asyncio
async def test_gate_receives_context_only():
    gate = AsyncMock(return_value=ConfirmationResult(action="dismissed"))
    workflow, _, _, _ = _make_workflow(gate)
    params = _params()

    await workflow.retry(params)

    gate.assert_awaited_once_with(RetryContext(
        execution_process_id="proc-1234567890",
        branch_status=params.branch_status,
        processes=params.processes,
    ))


# ── Cancellation ──


@pytest.mark.asyncio
async def test_dismissed_gate_submits_nothing_and_reports_nothing():
    gate = AsyncMock(return_value=ConfirmationResult(action="dismissed"))
    workflow, client, on_success, on_error = _make_workflow(gate)

    outcome = await workflow.retry(_params())

    assert outcome is RetryOutcome.CANCELLED
    client.follow_up.assert_not_called()
    on_error.assert_not_called()
    on_success.assert_not_called()


@pytest.mark.asyncio
async def test_gate_exception_is_treated_as_cancellation():
    gate = AsyncMock(side_effect=asyncio.TimeoutError())
    workflow, client, _, on_error = _make_workflow(gate)

    outcome = await workflow.retry(_params())

    assert outcome is RetryOutcome.CANCELLED
    client.follow_up.assert_not_called()
    on_error.assert_not_called()


@pytest.mark.asyncio
async def test_empty_message_skips_gate():
    gate = AsyncMock()
    workflow, client, _, on_error = _make_workflow(gate)

    outcome = await workflow.retry(_params(message="  \n"))

    assert outcome is RetryOutcome.SKIPPED
    gate.assert_not_called()
    client.follow_up.assert_not_called()
    on_error.assert_not_called()


# ── Request building ──


@pytest.mark.asyncio
async def test_confirmed_without_options_uses_defaults():
    gate = AsyncMock(return_value=ConfirmationResult(action="confirmed"))
    workflow, client, on_success, on_error = _make_workflow(gate)

    outcome = await workflow.retry(_params())

    assert outcome is RetryOutcome.SUCCEEDED
    session_id, request = client.follow_up.await_args.args
    assert session_id == "session-1"
    assert request.force_when_dirty is False
    assert request.perform_git_reset is True
    on_success.assert_called_once_with()
    on_error.assert_not_called()


@pytest.mark.asyncio
async def test_explicit_options_are_passed_through():
    gate = AsyncMock(return_value=ConfirmationResult.confirmed(
        force_when_dirty=True, perform_git_reset=False,
    ))
    workflow, client, _, _ = _make_workflow(gate)

    await workflow.retry(_params())

    _, request = client.follow_up.await_args.args
    assert request.force_when_dirty is True
    assert request.perform_git_reset is False


@pytest.mark.asyncio
async def test_request_uses_process_id_and_message_verbatim():
    gate = AsyncMock(return_value=ConfirmationResult(action="confirmed"))
    workflow, client, _, _ = _make_workflow(gate)
    message = "  keep   my\n\nspacing  "

    with patch("resubmit.engine.prompt.compose_prompt") as compose:
        await workflow.retry(_params(message=message, variant=None))
        compose.assert_not_called()

    _, request = client.follow_up.await_args.args
    assert request.retry_process_id == "proc-1234567890"
    assert request.prompt == message
    assert request.variant is None
    assert request.working_dir is None
    assert request.env is None


# ── Failure reporting ──


@pytest.mark.asyncio
async def test_submission_failure_reaches_on_error_with_original_error():
    error = SubmissionError("session-1", "process is still running", status=409)
    client = MagicMock()
    client.follow_up = AsyncMock(side_effect=error)
    gate = AsyncMock(return_value=ConfirmationResult(action="confirmed"))
    workflow, _, on_success, on_error = _make_workflow(gate, client)

    outcome = await workflow.retry(_params())

    assert outcome is RetryOutcome.FAILED
    on_error.assert_called_once_with(error)
    on_success.assert_not_called()
    assert workflow.is_pending is False


@pytest.mark.asyncio
async def test_submission_failure_is_logged(caplog):
    client = MagicMock()
    client.follow_up = AsyncMock(side_effect=RuntimeError("boom"))
    gate = AsyncMock(return_value=ConfirmationResult(action="confirmed"))
    workflow = RetryWorkflow(client, "session-1", gate)

    with caplog.at_level("ERROR", logger="resubmit.engine.retry"):
        outcome = await workflow.retry(_params())

    assert outcome is RetryOutcome.FAILED
    assert any("Failed to send retry" in m for m in caplog.messages)


@pytest.mark.asyncio
async def test_callbacks_are_optional():
    gate = AsyncMock(return_value=ConfirmationResult(action="confirmed"))
    client = MagicMock()
    client.follow_up = AsyncMock()
    workflow = RetryWorkflow(client, "session-1", gate)

    assert await workflow.retry(_params()) is RetryOutcome.SUCCEEDED


# ── Concurrency ──


@pytest.mark.asyncio
async def test_callbacks_fire_only_after_submission_resolves():
    release = asyncio.Event()
    events: list[str] = []

    async def follow_up(session_id, request):
        events.append("submit_started")
        await release.wait()
        events.append("submit_done")

    client = MagicMock()
    client.follow_up = follow_up
    gate = AsyncMock(return_value=ConfirmationResult(action="confirmed"))
    workflow = RetryWorkflow(
        client, "session-1", gate, on_success=lambda: events.append("on_success"),
    )

    task = asyncio.create_task(workflow.retry(_params()))
    await asyncio.sleep(0.01)
    assert workflow.is_pending is True
    assert events == ["submit_started"]

    release.set()
    assert await task is RetryOutcome.SUCCEEDED
    assert events == ["submit_started", "submit_done", "on_success"]
    assert workflow.is_pending is False


@pytest.mark.asyncio
async def test_overlapping_retries_are_independent():
    gate = AsyncMock(side_effect=[
        ConfirmationResult(action="confirmed"),
        ConfirmationResult(action="cancel"),
    ])
    workflow, client, on_success, on_error = _make_workflow(gate)

    outcomes = await asyncio.gather(
        workflow.retry(_params(execution_process_id="proc-a")),
        workflow.retry(_params(execution_process_id="proc-b")),
    )

    assert sorted(o.value for o in outcomes) == ["cancelled", "succeeded"]
    assert client.follow_up.await_count == 1
    assert on_success.call_count == 1
    on_error.assert_not_called()
