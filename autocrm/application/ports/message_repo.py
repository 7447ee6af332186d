"""Port interface for ticket conversation messages."""

from abc import ABC, abstractmethod

from autocrm.domain.entities.message import TicketMessage


class MessageRepository(ABC):
    @abstractmethod
    async def add(self, message: TicketMessage) -> TicketMessage:
        ...

    @abstractmethod
    async def get_by_ticket(self, ticket_id: str) -> list[TicketMessage]:
        """Conversation in chronological order."""
        ...
