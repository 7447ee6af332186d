"""SQLAlchemy implementations of the repository and transaction ports."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autocrm.adapters.persistence.models import (
    AIActionModel,
    TicketMessageModel,
    TicketModel,
    UserProfileModel,
)
from autocrm.application.ports.action_repo import ActionRecordRepository
from autocrm.application.ports.message_repo import MessageRepository
from autocrm.application.ports.ticket_repo import TicketRepository
from autocrm.application.ports.transaction_port import TransactionPort
from autocrm.application.ports.user_repo import UserRepository
from autocrm.domain.entities.action_record import ActionRecord
from autocrm.domain.entities.message import TicketMessage
from autocrm.domain.entities.preferences import UserAIPreferences
from autocrm.domain.entities.ticket import Ticket
from autocrm.domain.entities.user import UserProfile
from autocrm.domain.value_objects.enums import (
    OPEN_STATUSES,
    ActionStatus,
    TicketPriority,
    TicketStatus,
    UserRole,
)


def _is_uuid(value: str | None) -> bool:
    """Postgres rejects malformed UUID literals, so filter them out before querying."""
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ─── Mappers ─────────────────────────────────────────────────────────


def _user_to_domain(m: UserProfileModel) -> UserProfile:
    return UserProfile(
        id=m.id,
        full_name=m.full_name,
        role=UserRole(m.role),
        company=m.company,
        ai_preferences=UserAIPreferences.from_dict(m.ai_preferences),
    )


def _ticket_to_domain(m: TicketModel) -> Ticket:
    return Ticket(
        id=m.id,
        title=m.title,
        description=m.description,
        status=TicketStatus(m.status),
        priority=TicketPriority(m.priority),
        tags=set(m.tags or []),
        customer_id=m.customer_id,
        assigned_to=m.assigned_to,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


def _message_to_domain(m: TicketMessageModel) -> TicketMessage:
    return TicketMessage(
        id=m.id,
        ticket_id=m.ticket_id,
        sender_id=m.sender_id,
        content=m.content,
        is_internal=m.is_internal,
        created_at=m.created_at,
    )


def _action_to_domain(m: AIActionModel) -> ActionRecord:
    return ActionRecord(
        id=m.id,
        user_id=m.user_id,
        ticket_id=m.ticket_id,
        input_text=m.input_text,
        action_type=m.action_type,
        interpreted_action=dict(m.interpreted_action or {}),
        requires_approval=m.requires_approval,
        status=ActionStatus(m.status),
        error_message=m.error_message,
        decided_by=m.decided_by,
        created_at=m.created_at,
        executed_at=m.executed_at,
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlUserRepository(UserRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, user: UserProfile) -> UserProfile:
        m = UserProfileModel(
            full_name=user.full_name,
            role=user.role.value,
            company=user.company,
            ai_preferences=user.ai_preferences.to_dict(),
        )
        if user.id:
            m.id = user.id
        self._s.add(m)
        await self._s.flush()
        user.id = m.id
        return user

    async def get_by_id(self, user_id: str) -> UserProfile | None:
        if not _is_uuid(user_id):
            return None
        m = await self._s.get(UserProfileModel, user_id)
        return _user_to_domain(m) if m else None

    async def get_by_ids(self, user_ids: list[str]) -> list[UserProfile]:
        ids = [i for i in user_ids if _is_uuid(i)]
        if not ids:
            return []
        result = await self._s.execute(
            select(UserProfileModel).where(UserProfileModel.id.in_(ids))
        )
        return [_user_to_domain(m) for m in result.scalars()]

    async def get_by_role(self, role: UserRole) -> list[UserProfile]:
        result = await self._s.execute(
            select(UserProfileModel)
            .where(UserProfileModel.role == role.value)
            .order_by(UserProfileModel.full_name)
        )
        return [_user_to_domain(m) for m in result.scalars()]

    async def get_all(self) -> list[UserProfile]:
        result = await self._s.execute(
            select(UserProfileModel).order_by(UserProfileModel.full_name)
        )
        return [_user_to_domain(m) for m in result.scalars()]

    async def update_preferences(
        self, user_id: str, preferences: UserAIPreferences
    ) -> UserAIPreferences:
        await self._s.execute(
            update(UserProfileModel)
            .where(UserProfileModel.id == user_id)
            .values(ai_preferences=preferences.to_dict())
        )
        await self._s.flush()
        return preferences


class SqlTicketRepository(TicketRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, ticket: Ticket) -> Ticket:
        m = TicketModel(
            title=ticket.title,
            description=ticket.description,
            status=ticket.status.value,
            priority=ticket.priority.value,
            tags=sorted(ticket.tags),
            customer_id=ticket.customer_id,
            assigned_to=ticket.assigned_to,
        )
        if ticket.id:
            m.id = ticket.id
        if ticket.created_at:
            m.created_at = ticket.created_at
            m.updated_at = ticket.updated_at or ticket.created_at
        self._s.add(m)
        await self._s.flush()
        ticket.id = m.id
        return ticket

    async def get_by_id(self, ticket_id: str, for_update: bool = False) -> Ticket | None:
        if not _is_uuid(ticket_id):
            return None
        stmt = select(TicketModel).where(TicketModel.id == ticket_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self._s.execute(stmt)
        m = result.scalar_one_or_none()
        return _ticket_to_domain(m) if m else None

    async def get_by_customers(self, customer_ids: list[str]) -> list[Ticket]:
        ids = [i for i in customer_ids if _is_uuid(i)]
        if not ids:
            return []
        result = await self._s.execute(
            select(TicketModel)
            .where(TicketModel.customer_id.in_(ids))
            .order_by(TicketModel.created_at.desc())
        )
        return [_ticket_to_domain(m) for m in result.scalars()]

    async def get_open(self) -> list[Ticket]:
        result = await self._s.execute(
            select(TicketModel)
            .where(TicketModel.status.in_([s.value for s in OPEN_STATUSES]))
            .order_by(TicketModel.created_at.desc())
        )
        return [_ticket_to_domain(m) for m in result.scalars()]

    async def get_recent(self, limit: int) -> list[Ticket]:
        result = await self._s.execute(
            select(TicketModel).order_by(TicketModel.updated_at.desc()).limit(limit)
        )
        return [_ticket_to_domain(m) for m in result.scalars()]

    async def update(self, ticket: Ticket) -> Ticket:
        now = _utcnow()
        await self._s.execute(
            update(TicketModel)
            .where(TicketModel.id == ticket.id)
            .values(
                status=ticket.status.value,
                tags=sorted(ticket.tags),
                assigned_to=ticket.assigned_to,
                updated_at=now,
            )
        )
        await self._s.flush()
        ticket.updated_at = now
        return ticket


class SqlMessageRepository(MessageRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def add(self, message: TicketMessage) -> TicketMessage:
        m = TicketMessageModel(
            ticket_id=message.ticket_id,
            sender_id=message.sender_id,
            content=message.content,
            is_internal=message.is_internal,
            created_at=message.created_at or _utcnow(),
        )
        self._s.add(m)
        await self._s.flush()
        message.id = m.id
        message.created_at = m.created_at
        return message

    async def get_by_ticket(self, ticket_id: str) -> list[TicketMessage]:
        if not _is_uuid(ticket_id):
            return []
        result = await self._s.execute(
            select(TicketMessageModel)
            .where(TicketMessageModel.ticket_id == ticket_id)
            .order_by(TicketMessageModel.created_at)
        )
        return [_message_to_domain(m) for m in result.scalars()]


class SqlActionRecordRepository(ActionRecordRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, record: ActionRecord) -> ActionRecord:
        m = AIActionModel(
            user_id=record.user_id,
            ticket_id=record.ticket_id,
            input_text=record.input_text,
            action_type=record.action_type,
            interpreted_action=record.interpreted_action,
            status=record.status.value,
            requires_approval=record.requires_approval,
            error_message=record.error_message,
            decided_by=record.decided_by,
            created_at=record.created_at or _utcnow(),
            executed_at=record.executed_at,
        )
        self._s.add(m)
        await self._s.flush()
        record.id = m.id
        record.created_at = m.created_at
        return record

    async def get_by_id(self, action_id: str, for_update: bool = False) -> ActionRecord | None:
        if not _is_uuid(action_id):
            return None
        stmt = select(AIActionModel).where(AIActionModel.id == action_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self._s.execute(stmt)
        m = result.scalar_one_or_none()
        return _action_to_domain(m) if m else None

    async def update(self, record: ActionRecord) -> ActionRecord:
        await self._s.execute(
            update(AIActionModel)
            .where(AIActionModel.id == record.id)
            .values(
                status=record.status.value,
                error_message=record.error_message,
                decided_by=record.decided_by,
                executed_at=record.executed_at,
            )
        )
        await self._s.flush()
        return record

    async def get_by_user(self, user_id: str) -> list[ActionRecord]:
        if not _is_uuid(user_id):
            return []
        result = await self._s.execute(
            select(AIActionModel)
            .where(AIActionModel.user_id == user_id)
            .order_by(AIActionModel.created_at.desc())
        )
        return [_action_to_domain(m) for m in result.scalars()]


class SqlTransaction(TransactionPort):
    """SAVEPOINT-backed all-or-nothing block inside the request transaction."""

    def __init__(self, session: AsyncSession):
        self._s = session

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        async with self._s.begin_nested():
            yield
