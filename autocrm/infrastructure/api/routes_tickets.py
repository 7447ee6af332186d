"""Ticket endpoints — read-only list + detail view for the dashboards."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from autocrm.application.ports.message_repo import MessageRepository
from autocrm.application.ports.ticket_repo import TicketRepository
from autocrm.application.ports.user_repo import UserRepository
from autocrm.domain.entities.message import TicketMessage
from autocrm.domain.entities.ticket import Ticket
from autocrm.domain.entities.user import UserProfile
from autocrm.domain.errors import TicketNotFoundError
from autocrm.infrastructure.api.dependencies import (
    get_message_repo,
    get_ticket_repo,
    get_user_repo,
)

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.get("")
async def list_tickets(
    limit: int = Query(default=100, ge=1, le=500),
    tickets: TicketRepository = Depends(get_ticket_repo),
    users: UserRepository = Depends(get_user_repo),
):
    """Most recently updated tickets with customer and assignee names."""
    rows = await tickets.get_recent(limit)
    people = await _people_for(rows, users)
    return {
        "total": len(rows),
        "tickets": [_serialize_ticket(t, people) for t in rows],
    }


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: str,
    tickets: TicketRepository = Depends(get_ticket_repo),
    messages: MessageRepository = Depends(get_message_repo),
    users: UserRepository = Depends(get_user_repo),
):
    """A single ticket with its conversation thread."""
    ticket = await tickets.get_by_id(ticket_id)
    if not ticket:
        raise TicketNotFoundError(f"Ticket not found: {ticket_id}")

    thread = await messages.get_by_ticket(ticket.id)
    people = await _people_for([ticket], users, [m.sender_id for m in thread])

    data = _serialize_ticket(ticket, people)
    data["messages"] = [_serialize_message(m, people) for m in thread]
    return data


async def _people_for(
    tickets: list[Ticket], users: UserRepository, extra_ids: list[str] | None = None
) -> dict[str, UserProfile]:
    ids = {t.customer_id for t in tickets} | {t.assigned_to for t in tickets if t.assigned_to}
    ids |= set(extra_ids or [])
    return {u.id: u for u in await users.get_by_ids(sorted(ids))}


def _name(people: dict[str, UserProfile], user_id: str | None) -> str | None:
    if not user_id:
        return None
    user = people.get(user_id)
    return user.full_name if user else None


def _serialize_ticket(t: Ticket, people: dict[str, UserProfile]) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "status": t.status.value,
        "priority": t.priority.value,
        "tags": sorted(t.tags),
        "customer_id": t.customer_id,
        "customer_name": _name(people, t.customer_id),
        "assigned_to": t.assigned_to,
        "assigned_to_name": _name(people, t.assigned_to),
        "created_at": t.created_at.isoformat() if t.created_at else None,
        "updated_at": t.updated_at.isoformat() if t.updated_at else None,
    }


def _serialize_message(m: TicketMessage, people: dict[str, UserProfile]) -> dict:
    return {
        "id": m.id,
        "sender_id": m.sender_id,
        "sender_name": _name(people, m.sender_id),
        "content": m.content,
        "is_internal": m.is_internal,
        "created_at": m.created_at.isoformat() if m.created_at else None,
    }
