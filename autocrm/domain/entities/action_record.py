"""ActionRecord — the persisted, auditable lifecycle of one StructuredAction."""

from dataclasses import dataclass, field
from datetime import datetime

from autocrm.domain.value_objects.enums import TERMINAL_ACTION_STATUSES, ActionStatus


@dataclass
class ActionRecord:
    id: str | None
    user_id: str
    ticket_id: str
    input_text: str
    action_type: str  # raw stored value; may be unrecognized
    interpreted_action: dict = field(default_factory=dict)
    requires_approval: bool = True
    status: ActionStatus = ActionStatus.PENDING
    error_message: str | None = None
    decided_by: str | None = None
    created_at: datetime | None = None
    executed_at: datetime | None = None

    def is_pending(self) -> bool:
        return self.status == ActionStatus.PENDING

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ACTION_STATUSES
