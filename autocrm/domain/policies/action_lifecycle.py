"""ActionLifecyclePolicy — the ActionRecord state machine.

    pending ──► approved ──► executed
       │           └───────► failed
       ├──► rejected
       ├──► executed   (only when no approval is required)
       └──► failed     (only when no approval is required)

rejected, executed and failed are terminal.
"""

from __future__ import annotations

from datetime import datetime, timezone

from autocrm.domain.entities.action_record import ActionRecord
from autocrm.domain.errors import ActionNotPendingError, InvalidTransitionError
from autocrm.domain.value_objects.enums import ActionStatus

VALID_TRANSITIONS: dict[ActionStatus, frozenset[ActionStatus]] = {
    ActionStatus.PENDING: frozenset(
        {
            ActionStatus.APPROVED,
            ActionStatus.REJECTED,
            ActionStatus.EXECUTED,
            ActionStatus.FAILED,
        }
    ),
    ActionStatus.APPROVED: frozenset({ActionStatus.EXECUTED, ActionStatus.FAILED}),
    ActionStatus.REJECTED: frozenset(),
    ActionStatus.EXECUTED: frozenset(),
    ActionStatus.FAILED: frozenset(),
}

# Pending records may skip the approval step only when they never needed it
_UNGATED_FROM_PENDING = frozenset({ActionStatus.EXECUTED, ActionStatus.FAILED})


def can_transition(record: ActionRecord, new_status: ActionStatus) -> bool:
    """Pure check: is *record.status → new_status* a legal move for this record?"""
    if new_status not in VALID_TRANSITIONS[record.status]:
        return False
    if (
        record.status == ActionStatus.PENDING
        and new_status in _UNGATED_FROM_PENDING
        and record.requires_approval
    ):
        return False
    return True


def transition(
    record: ActionRecord,
    new_status: ActionStatus,
    *,
    error_message: str | None = None,
    decided_by: str | None = None,
    now: datetime | None = None,
) -> ActionRecord:
    """Move *record* to *new_status* in place and return it.

    Raises:
        ActionNotPendingError: the record is already terminal.
        InvalidTransitionError: the move is not allowed from the current
            state, or a failure is recorded without a message.
    """
    if record.is_terminal():
        raise ActionNotPendingError(
            f"Action {record.id} is already {record.status.value}; "
            f"cannot move it to {new_status.value}"
        )

    if not can_transition(record, new_status):
        if record.status == ActionStatus.PENDING and record.requires_approval:
            reason = "it requires approval first"
        else:
            reason = "the transition is not permitted"
        raise InvalidTransitionError(
            f"Action {record.id} cannot move from {record.status.value} "
            f"to {new_status.value}: {reason}"
        )

    if new_status == ActionStatus.FAILED and not (error_message and error_message.strip()):
        raise InvalidTransitionError(
            f"Action {record.id} cannot be marked failed without an error message"
        )

    record.status = new_status
    if new_status == ActionStatus.FAILED:
        record.error_message = error_message.strip()
    if decided_by is not None:
        record.decided_by = decided_by
    if record.is_terminal():
        record.executed_at = now or datetime.now(timezone.utc)
    return record
