"""Ticket entity — a customer's repair/support request."""

from dataclasses import dataclass, field
from datetime import datetime

from autocrm.domain.value_objects.enums import OPEN_STATUSES, TicketPriority, TicketStatus


@dataclass
class Ticket:
    id: str | None
    title: str
    customer_id: str
    description: str | None = None
    status: TicketStatus = TicketStatus.NEW
    priority: TicketPriority = TicketPriority.MEDIUM
    tags: set[str] = field(default_factory=set)
    assigned_to: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def keyword_hits(self, keywords: list[str] | tuple[str, ...]) -> int:
        """Count how many keywords match a tag or appear in title/description.

        Tags match exactly or as a hyphen-separated part ("hydraulic" hits
        "hydraulic-repair"); text matches are case-insensitive substrings.
        """
        tags = {t.lower() for t in self.tags}
        tag_parts = {part for t in tags for part in t.split("-")}
        text = f"{self.title} {self.description or ''}".lower()

        hits = 0
        for kw in keywords:
            k = kw.strip().lower()
            if not k:
                continue
            if k in tags or k in tag_parts or k in text:
                hits += 1
        return hits
