"""ActionValidationPolicy — per-type required fields and enum ranges.

Run immediately before an action's effects are applied, so nothing is
written for an invalid action.
"""

from __future__ import annotations

from autocrm.domain.entities.structured_action import StructuredAction
from autocrm.domain.errors import ActionValidationError
from autocrm.domain.value_objects.enums import ActionType, TicketStatus

STATUS_MAP: dict[str, TicketStatus] = {s.value: s for s in TicketStatus}


def parse_action_type(raw: str) -> ActionType:
    try:
        return ActionType(raw)
    except ValueError:
        raise ActionValidationError(f"Unsupported action type: {raw}") from None


def parse_status(raw: str) -> TicketStatus:
    """Map a raw status string onto TicketStatus ("Pending Customer" → pending_customer)."""
    key = "_".join((raw or "").strip().lower().replace("-", " ").split())
    status = STATUS_MAP.get(key)
    if status is None:
        allowed = ", ".join(STATUS_MAP)
        raise ActionValidationError(f"Invalid status '{raw}'. Expected one of: {allowed}")
    return status


def validate_action(action: StructuredAction) -> TicketStatus | None:
    """Check *action* has what its type needs.

    Returns the parsed status update (or None when the action carries none).

    Raises:
        ActionValidationError: a required field is missing or out of range.
    """
    status = parse_status(action.status_update) if action.status_update else None

    if action.action_type == ActionType.ADD_NOTE:
        if not (action.note_content and action.note_content.strip()):
            raise ActionValidationError("add_note requires non-empty note_content")

    elif action.action_type == ActionType.UPDATE_STATUS:
        if status is None:
            raise ActionValidationError("update_status requires status_update")

    elif action.action_type == ActionType.UPDATE_TAGS:
        if not (action.tags_to_add or action.tags_to_remove):
            raise ActionValidationError(
                "update_tags requires tags_to_add or tags_to_remove"
            )

    elif action.action_type == ActionType.ASSIGN_TICKET:
        if not (action.assign_to and action.assign_to.strip()):
            raise ActionValidationError("assign_ticket requires assign_to")

    return status
