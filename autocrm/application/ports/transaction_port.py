"""Port interface for all-or-nothing groups of writes."""

from abc import ABC, abstractmethod
from typing import AsyncContextManager


class TransactionPort(ABC):
    @abstractmethod
    def savepoint(self) -> AsyncContextManager[None]:
        """Writes inside the block are undone if the block raises."""
        ...
