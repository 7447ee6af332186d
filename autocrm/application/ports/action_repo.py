"""Port interface for ActionRecord persistence (the audit trail)."""

from abc import ABC, abstractmethod

from autocrm.domain.entities.action_record import ActionRecord


class ActionRecordRepository(ABC):
    @abstractmethod
    async def save(self, record: ActionRecord) -> ActionRecord:
        """Insert a new record; sets id and created_at."""
        ...

    @abstractmethod
    async def get_by_id(self, action_id: str, for_update: bool = False) -> ActionRecord | None:
        """With *for_update* the row stays locked until the transaction ends."""
        ...

    @abstractmethod
    async def update(self, record: ActionRecord) -> ActionRecord:
        """Persist status, error_message, decided_by and executed_at."""
        ...

    @abstractmethod
    async def get_by_user(self, user_id: str) -> list[ActionRecord]:
        """Newest first."""
        ...
