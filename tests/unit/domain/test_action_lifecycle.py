"""Tests for the ActionRecord state machine."""

from datetime import datetime, timezone

import pytest

from autocrm.domain.entities.action_record import ActionRecord
from autocrm.domain.errors import ActionNotPendingError, InvalidTransitionError
from autocrm.domain.policies.action_lifecycle import can_transition, transition
from autocrm.domain.value_objects.enums import ActionStatus

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _rec(status=ActionStatus.PENDING, requires_approval=True):
    return ActionRecord(
        id="a1",
        user_id="carol",
        ticket_id="t1",
        input_text="close Jack's ticket",
        action_type="update_status",
        status=status,
        requires_approval=requires_approval,
    )


def test_gated_pending_can_only_be_approved_or_rejected():
    r = _rec()
    assert can_transition(r, ActionStatus.APPROVED)
    assert can_transition(r, ActionStatus.REJECTED)
    assert not can_transition(r, ActionStatus.EXECUTED)
    assert not can_transition(r, ActionStatus.FAILED)


def test_ungated_pending_may_execute_directly():
    r = _rec(requires_approval=False)
    assert can_transition(r, ActionStatus.EXECUTED)
    assert can_transition(r, ActionStatus.FAILED)


def test_approved_moves_only_to_an_outcome():
    r = _rec(ActionStatus.APPROVED)
    assert can_transition(r, ActionStatus.EXECUTED)
    assert can_transition(r, ActionStatus.FAILED)
    assert not can_transition(r, ActionStatus.REJECTED)
    assert not can_transition(r, ActionStatus.PENDING)


def test_approve_records_decider_without_finishing():
    r = transition(_rec(), ActionStatus.APPROVED, decided_by="eva", now=NOW)
    assert r.status == ActionStatus.APPROVED
    assert r.decided_by == "eva"
    assert r.executed_at is None


def test_terminal_transition_stamps_executed_at():
    r = transition(_rec(), ActionStatus.REJECTED, decided_by="carol", now=NOW)
    assert r.status == ActionStatus.REJECTED
    assert r.executed_at == NOW


def test_failed_requires_message():
    r = _rec(ActionStatus.APPROVED)
    with pytest.raises(InvalidTransitionError):
        transition(r, ActionStatus.FAILED, error_message="   ")
    assert r.status == ActionStatus.APPROVED


def test_failed_stores_message():
    r = transition(
        _rec(ActionStatus.APPROVED), ActionStatus.FAILED, error_message=" bad status ", now=NOW
    )
    assert r.error_message == "bad status"
    assert r.executed_at == NOW


@pytest.mark.parametrize(
    "terminal", [ActionStatus.REJECTED, ActionStatus.EXECUTED, ActionStatus.FAILED]
)
def test_terminal_records_never_move(terminal):
    r = _rec(terminal)
    with pytest.raises(ActionNotPendingError):
        transition(r, ActionStatus.APPROVED)
    assert r.status == terminal


def test_gated_pending_cannot_execute():
    r = _rec()
    with pytest.raises(InvalidTransitionError, match="requires approval"):
        transition(r, ActionStatus.EXECUTED)
    assert r.status == ActionStatus.PENDING
