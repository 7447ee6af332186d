"""In-memory fakes for the application ports."""

from __future__ import annotations

import asyncio
import copy
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from autocrm.application.ports.action_repo import ActionRecordRepository
from autocrm.application.ports.llm_port import ActionInterpreterPort
from autocrm.application.ports.message_repo import MessageRepository
from autocrm.application.ports.ticket_repo import TicketRepository
from autocrm.application.ports.transaction_port import TransactionPort
from autocrm.application.ports.transcription_port import TranscriptionPort
from autocrm.application.ports.user_repo import UserRepository
from autocrm.application.use_cases.decide_action import DecideActionUseCase
from autocrm.application.use_cases.execute_action import ActionExecutor
from autocrm.application.use_cases.resolve_customer import CustomerResolver
from autocrm.application.use_cases.submit_action import SubmitActionUseCase
from autocrm.domain.entities.preferences import UserAIPreferences
from autocrm.domain.entities.ticket import Ticket
from autocrm.domain.entities.user import UserProfile
from autocrm.domain.value_objects.enums import (
    OPEN_STATUSES,
    TicketPriority,
    TicketStatus,
    UserRole,
)

T0 = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)


@dataclass
class Store:
    users: dict = field(default_factory=dict)
    tickets: dict = field(default_factory=dict)
    messages: list = field(default_factory=list)
    actions: dict = field(default_factory=dict)


class FakeUserRepo(UserRepository):
    def __init__(self, store: Store):
        self._store = store

    async def save(self, user):
        user.id = user.id or f"user-{len(self._store.users) + 1}"
        self._store.users[user.id] = copy.deepcopy(user)
        return user

    async def get_by_id(self, user_id):
        u = self._store.users.get(user_id)
        return copy.deepcopy(u) if u else None

    async def get_by_ids(self, user_ids):
        return [copy.deepcopy(self._store.users[i]) for i in user_ids if i in self._store.users]

    async def get_by_role(self, role):
        return [copy.deepcopy(u) for u in self._store.users.values() if u.role == role]

    async def get_all(self):
        return [copy.deepcopy(u) for u in self._store.users.values()]

    async def update_preferences(self, user_id, preferences):
        self._store.users[user_id].ai_preferences = copy.deepcopy(preferences)
        return preferences


class FakeTicketRepo(TicketRepository):
    def __init__(self, store: Store):
        self._store = store
        self.fail_on_update: Exception | None = None
        self.locked_reads = 0

    async def save(self, ticket):
        ticket.id = ticket.id or f"ticket-{len(self._store.tickets) + 1}"
        self._store.tickets[ticket.id] = copy.deepcopy(ticket)
        return ticket

    async def get_by_id(self, ticket_id, for_update=False):
        if for_update:
            self.locked_reads += 1
        t = self._store.tickets.get(ticket_id)
        return copy.deepcopy(t) if t else None

    async def get_by_customers(self, customer_ids):
        found = [t for t in self._store.tickets.values() if t.customer_id in customer_ids]
        found.sort(key=lambda t: t.created_at or T0, reverse=True)
        return copy.deepcopy(found)

    async def get_open(self):
        found = [t for t in self._store.tickets.values() if t.status in OPEN_STATUSES]
        found.sort(key=lambda t: t.created_at or T0, reverse=True)
        return copy.deepcopy(found)

    async def get_recent(self, limit):
        found = sorted(
            self._store.tickets.values(),
            key=lambda t: t.updated_at or t.created_at or T0,
            reverse=True,
        )
        return copy.deepcopy(found[:limit])

    async def update(self, ticket):
        if self.fail_on_update is not None:
            raise self.fail_on_update
        self._store.tickets[ticket.id] = copy.deepcopy(ticket)
        return ticket


class FakeMessageRepo(MessageRepository):
    def __init__(self, store: Store):
        self._store = store

    async def add(self, message):
        message.id = f"msg-{len(self._store.messages) + 1}"
        message.created_at = message.created_at or T0
        self._store.messages.append(copy.deepcopy(message))
        return message

    async def get_by_ticket(self, ticket_id):
        return [copy.deepcopy(m) for m in self._store.messages if m.ticket_id == ticket_id]


class FakeActionRepo(ActionRecordRepository):
    def __init__(self, store: Store):
        self._store = store

    async def save(self, record):
        n = len(self._store.actions) + 1
        record.id = f"action-{n}"
        record.created_at = T0 + timedelta(minutes=n)
        self._store.actions[record.id] = copy.deepcopy(record)
        return record

    async def get_by_id(self, action_id, for_update=False):
        r = self._store.actions.get(action_id)
        return copy.deepcopy(r) if r else None

    async def update(self, record):
        self._store.actions[record.id] = copy.deepcopy(record)
        return record

    async def get_by_user(self, user_id):
        found = [r for r in self._store.actions.values() if r.user_id == user_id]
        found.sort(key=lambda r: r.created_at, reverse=True)
        return copy.deepcopy(found)


class FakeTransaction(TransactionPort):
    """Snapshot tickets and messages; restore them if the block raises."""

    def __init__(self, store: Store):
        self._store = store
        self.rollbacks = 0

    @asynccontextmanager
    async def savepoint(self):
        tickets = copy.deepcopy(self._store.tickets)
        messages = copy.deepcopy(self._store.messages)
        try:
            yield
        except Exception:
            self._store.tickets = tickets
            self._store.messages = messages
            self.rollbacks += 1
            raise


class FakeInterpreter(ActionInterpreterPort):
    def __init__(self, actions=None, error: Exception | None = None, delay: float = 0.0):
        self.actions = actions or []
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, object]] = []

    async def interpret(self, input_text, context=None):
        self.calls.append((input_text, context))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.actions)


class FakeTranscriber(TranscriptionPort):
    def __init__(self, text: str = "", error: Exception | None = None, delay: float = 0.0):
        self.text = text
        self.error = error
        self.delay = delay
        self.calls: list[tuple[bytes, str | None]] = []

    async def transcribe(self, audio, prompt=None):
        self.calls.append((audio, prompt))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.text


class World:
    """A small CRM: repositories over one shared store, plus seeding helpers."""

    def __init__(self):
        self.store = Store()
        self.users = FakeUserRepo(self.store)
        self.tickets = FakeTicketRepo(self.store)
        self.messages = FakeMessageRepo(self.store)
        self.actions = FakeActionRepo(self.store)
        self.tx = FakeTransaction(self.store)

    # ── Seeding ──

    def add_user(
        self,
        user_id: str,
        full_name: str,
        role: UserRole = UserRole.CUSTOMER,
        preferences: UserAIPreferences | None = None,
    ) -> UserProfile:
        user = UserProfile(
            id=user_id,
            full_name=full_name,
            role=role,
            ai_preferences=preferences or UserAIPreferences(),
        )
        self.store.users[user_id] = copy.deepcopy(user)
        return user

    def add_ticket(
        self,
        ticket_id: str,
        customer_id: str,
        title: str,
        *,
        tags=(),
        description: str | None = None,
        status: TicketStatus = TicketStatus.OPEN,
        assigned_to: str | None = None,
        age_hours: int = 0,
    ) -> Ticket:
        created = T0 - timedelta(hours=age_hours)
        ticket = Ticket(
            id=ticket_id,
            title=title,
            customer_id=customer_id,
            description=description,
            status=status,
            priority=TicketPriority.MEDIUM,
            tags=set(tags),
            assigned_to=assigned_to,
            created_at=created,
            updated_at=created,
        )
        self.store.tickets[ticket_id] = copy.deepcopy(ticket)
        return ticket

    # ── Reads for assertions ──

    def ticket(self, ticket_id: str) -> Ticket:
        return self.store.tickets[ticket_id]

    def messages_for(self, ticket_id: str) -> list:
        return [m for m in self.store.messages if m.ticket_id == ticket_id]

    def record(self, action_id: str):
        return self.store.actions[action_id]

    # ── Wiring ──

    def resolver(self) -> CustomerResolver:
        return CustomerResolver(self.users, self.tickets)

    def executor(self) -> ActionExecutor:
        return ActionExecutor(self.tickets, self.messages, self.actions, self.tx)

    def submit_uc(self, interpreter: ActionInterpreterPort, timeout: float = 5.0) -> SubmitActionUseCase:
        return SubmitActionUseCase(
            interpreter=interpreter,
            resolver=self.resolver(),
            executor=self.executor(),
            user_repo=self.users,
            ticket_repo=self.tickets,
            action_repo=self.actions,
            timeout_seconds=timeout,
        )

    def decide_uc(self) -> DecideActionUseCase:
        return DecideActionUseCase(self.users, self.actions, self.executor())
