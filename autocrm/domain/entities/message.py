"""Ticket message — one entry in a ticket's conversation thread."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TicketMessage:
    id: str | None
    ticket_id: str
    sender_id: str
    content: str
    is_internal: bool = True
    created_at: datetime | None = None
