"""ActionExecutor — apply an ActionRecord's effects to the ticket store."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from autocrm.application.ports.action_repo import ActionRecordRepository
from autocrm.application.ports.message_repo import MessageRepository
from autocrm.application.ports.ticket_repo import TicketRepository
from autocrm.application.ports.transaction_port import TransactionPort
from autocrm.domain.entities.action_record import ActionRecord
from autocrm.domain.entities.message import TicketMessage
from autocrm.domain.entities.structured_action import StructuredAction
from autocrm.domain.entities.ticket import Ticket
from autocrm.domain.errors import (
    ActionNotPendingError,
    AutoCRMError,
    ExecutionError,
    InvalidTransitionError,
)
from autocrm.domain.policies.action_lifecycle import transition
from autocrm.domain.policies.action_validation import parse_action_type, validate_action
from autocrm.domain.policies.tag_update import compute_tags
from autocrm.domain.value_objects.enums import ActionStatus, ActionType, TicketStatus

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of one execution attempt."""

    action_id: str
    status: ActionStatus
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == ActionStatus.EXECUTED


class ActionExecutor:
    """Runs approved (or approval-free pending) records exactly once."""

    def __init__(
        self,
        ticket_repo: TicketRepository,
        message_repo: MessageRepository,
        action_repo: ActionRecordRepository,
        transactions: TransactionPort,
    ):
        self._tickets = ticket_repo
        self._messages = message_repo
        self._actions = action_repo
        self._tx = transactions

    async def execute(self, record: ActionRecord) -> ExecutionResult:
        """Apply *record* and move it to executed or failed.

        Effects run inside one savepoint, so a two-part action (note + status,
        assignment + status) either lands completely or not at all.

        Raises:
            ActionNotPendingError: the record is already terminal.
            InvalidTransitionError: the record still awaits approval.
        """
        if record.is_terminal():
            raise ActionNotPendingError(
                f"Action {record.id} is already {record.status.value}"
            )
        if record.status == ActionStatus.PENDING and record.requires_approval:
            raise InvalidTransitionError(
                f"Action {record.id} requires approval before it can be executed"
            )

        try:
            async with self._tx.savepoint():
                await self._apply(record)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            if isinstance(e, AutoCRMError):
                logger.warning("Action %s failed: %s", record.id, message)
            else:
                logger.exception("Action %s failed with an unexpected error", record.id)
            transition(record, ActionStatus.FAILED, error_message=message)
            await self._actions.update(record)
            return ExecutionResult(record.id, ActionStatus.FAILED, record.error_message)

        transition(record, ActionStatus.EXECUTED)
        await self._actions.update(record)
        logger.info(
            "Action %s executed (%s on ticket %s)",
            record.id, record.action_type, record.ticket_id,
        )
        return ExecutionResult(record.id, ActionStatus.EXECUTED)

    async def _apply(self, record: ActionRecord) -> None:
        action_type = parse_action_type(record.action_type)
        action = StructuredAction.from_payload(action_type, record.interpreted_action)
        status = validate_action(action)

        # Fresh, locked read: tag updates must not be computed from a stale copy
        ticket = await self._tickets.get_by_id(record.ticket_id, for_update=True)
        if ticket is None:
            raise ExecutionError(f"Ticket {record.ticket_id} no longer exists")

        if action_type == ActionType.ADD_NOTE:
            await self._add_note(record, ticket, action, status)
        elif action_type == ActionType.UPDATE_STATUS:
            ticket.status = status
            await self._tickets.update(ticket)
        elif action_type == ActionType.UPDATE_TAGS:
            ticket.tags = compute_tags(ticket.tags, action.tags_to_add, action.tags_to_remove)
            await self._tickets.update(ticket)
        elif action_type == ActionType.ASSIGN_TICKET:
            ticket.assigned_to = action.assign_to
            if status is not None:
                ticket.status = status
            elif ticket.status == TicketStatus.NEW:
                ticket.status = TicketStatus.OPEN
            await self._tickets.update(ticket)

    async def _add_note(
        self,
        record: ActionRecord,
        ticket: Ticket,
        action: StructuredAction,
        status: TicketStatus | None,
    ) -> None:
        await self._messages.add(
            TicketMessage(
                id=None,
                ticket_id=ticket.id,
                sender_id=record.user_id,
                content=action.note_content.strip(),
                is_internal=not action.is_customer_visible,
            )
        )
        if status is None:
            return

        ticket.status = status
        try:
            await self._tickets.update(ticket)
        except Exception as e:
            raise ExecutionError(
                f"Status update to '{status.value}' failed ({e}); "
                f"the note was not added either"
            ) from e
