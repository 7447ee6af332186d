"""ActionHistoryUseCase — a user's ActionRecords with their tickets, newest first."""

from __future__ import annotations

from dataclasses import dataclass

from autocrm.application.ports.action_repo import ActionRecordRepository
from autocrm.application.ports.ticket_repo import TicketRepository
from autocrm.domain.entities.action_record import ActionRecord
from autocrm.domain.entities.ticket import Ticket


@dataclass
class HistoryEntry:
    record: ActionRecord
    ticket: Ticket | None  # None once the ticket has been removed


class ActionHistoryUseCase:
    def __init__(self, action_repo: ActionRecordRepository, ticket_repo: TicketRepository):
        self._actions = action_repo
        self._tickets = ticket_repo

    async def execute(self, user_id: str) -> list[HistoryEntry]:
        records = await self._actions.get_by_user(user_id)
        tickets: dict[str, Ticket | None] = {}
        for ticket_id in {r.ticket_id for r in records}:
            tickets[ticket_id] = await self._tickets.get_by_id(ticket_id)
        return [HistoryEntry(r, tickets.get(r.ticket_id)) for r in records]
