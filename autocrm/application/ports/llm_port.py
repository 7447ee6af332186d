"""Port interface for natural-language → StructuredAction interpretation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from autocrm.domain.entities.structured_action import StructuredAction


@dataclass(frozen=True)
class TicketContext:
    """What the interpreter may know about one recent ticket."""

    ticket_id: str
    title: str
    status: str
    tags: tuple[str, ...]
    customer_name: str
    assigned_to: str | None = None


@dataclass(frozen=True)
class InterpretationContext:
    acting_user_id: str
    recent_tickets: tuple[TicketContext, ...] = field(default_factory=tuple)


class ActionInterpreterPort(ABC):
    @abstractmethod
    async def interpret(
        self, input_text: str, context: InterpretationContext | None = None
    ) -> list[StructuredAction]:
        """Turn free text into zero or more StructuredActions.

        One action per discrete instruction: several customers or several
        distinct changes for one customer yield several actions.

        Raises:
            InterpretationError: the engine failed or returned a payload that
                does not satisfy the action schema.
        """
        ...
