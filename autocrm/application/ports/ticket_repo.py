"""Port interface for ticket persistence."""

from abc import ABC, abstractmethod

from autocrm.domain.entities.ticket import Ticket


class TicketRepository(ABC):
    @abstractmethod
    async def save(self, ticket: Ticket) -> Ticket:
        ...

    @abstractmethod
    async def get_by_id(self, ticket_id: str, for_update: bool = False) -> Ticket | None:
        """Fetch a ticket.

        With ``for_update=True`` the row is re-read from the store and locked
        until the surrounding transaction ends.
        """
        ...

    @abstractmethod
    async def get_by_customers(self, customer_ids: list[str]) -> list[Ticket]:
        """All tickets of the given customers, newest first."""
        ...

    @abstractmethod
    async def get_open(self) -> list[Ticket]:
        ...

    @abstractmethod
    async def get_recent(self, limit: int) -> list[Ticket]:
        """Most recently updated tickets, newest first."""
        ...

    @abstractmethod
    async def update(self, ticket: Ticket) -> Ticket:
        """Persist status, tags and assignment in a single write."""
        ...
