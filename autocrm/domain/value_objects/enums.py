"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class TicketStatus(str, Enum):
    NEW = "new"
    OPEN = "open"
    PENDING_CUSTOMER = "pending_customer"
    PENDING_INTERNAL = "pending_internal"
    RESOLVED = "resolved"
    CLOSED = "closed"


# Statuses a ticket can still be worked on in
OPEN_STATUSES = frozenset(
    {
        TicketStatus.NEW,
        TicketStatus.OPEN,
        TicketStatus.PENDING_CUSTOMER,
        TicketStatus.PENDING_INTERNAL,
    }
)


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class UserRole(str, Enum):
    CUSTOMER = "customer"
    SERVICE_REP = "service_rep"
    ADMIN = "admin"


class ActionType(str, Enum):
    ADD_NOTE = "add_note"
    UPDATE_STATUS = "update_status"
    UPDATE_TAGS = "update_tags"
    ASSIGN_TICKET = "assign_ticket"


class ActionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXECUTED = "executed"
    FAILED = "failed"


TERMINAL_ACTION_STATUSES = frozenset(
    {ActionStatus.REJECTED, ActionStatus.EXECUTED, ActionStatus.FAILED}
)


class NoteVisibility(str, Enum):
    INTERNAL = "internal"
    CUSTOMER = "customer"
