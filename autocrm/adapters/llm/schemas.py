"""Pydantic models for the interpreter's function-call payload."""

from __future__ import annotations

import json
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from autocrm.domain.entities.structured_action import StructuredAction
from autocrm.domain.errors import InterpretationError
from autocrm.domain.value_objects.enums import ActionType, TicketStatus

FUNCTION_NAME = "interpret_service_rep_input"

ActionTypeLabel = Literal["add_note", "update_status", "update_tags", "assign_ticket"]


class InterpretedAction(BaseModel):
    action_type: ActionTypeLabel
    customer_name: Optional[str] = None
    note_content: Optional[str] = None
    is_customer_visible: Optional[bool] = None
    status_update: Optional[str] = None
    tags_to_add: List[str] = Field(default_factory=list)
    tags_to_remove: List[str] = Field(default_factory=list)
    assign_to: Optional[str] = None
    ticket_keywords: List[str] = Field(default_factory=list)
    confidence_score: float = 0.0

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _clamp_confidence(cls, v):
        try:
            score = float(v)
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, min(1.0, score))

    @field_validator("tags_to_add", "tags_to_remove", "ticket_keywords", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return v or []

    def to_domain(self) -> StructuredAction:
        return StructuredAction(
            action_type=ActionType(self.action_type),
            customer_name=(self.customer_name or "").strip() or None,
            note_content=self.note_content,
            is_customer_visible=self.is_customer_visible,
            status_update=self.status_update or None,
            tags_to_add=[t.strip() for t in self.tags_to_add if t and t.strip()],
            tags_to_remove=[t.strip() for t in self.tags_to_remove if t and t.strip()],
            assign_to=self.assign_to or None,
            confidence_score=self.confidence_score,
            ticket_keywords=[k.strip() for k in self.ticket_keywords if k and k.strip()],
        )


class InterpretationPayload(BaseModel):
    actions: List[InterpretedAction]


def parse_interpretation(raw: str | dict | None) -> list[StructuredAction]:
    """Validate the model's arguments JSON and map it onto domain actions.

    Raises:
        InterpretationError: the payload is not JSON or does not fit the schema.
    """
    if raw is None or raw == "":
        raise InterpretationError("Interpreter returned an empty payload")
    try:
        data = json.loads(raw) if isinstance(raw, str) else raw
        payload = InterpretationPayload.model_validate(data)
    except json.JSONDecodeError as e:
        raise InterpretationError(f"Interpreter returned invalid JSON: {e.msg}") from e
    except ValidationError as e:
        raise InterpretationError(
            f"Interpreter payload failed schema validation: {e.error_count()} error(s)"
        ) from e
    return [a.to_domain() for a in payload.actions]


# JSON schema offered to the model as its only callable function
FUNCTION_SCHEMA = {
    "name": FUNCTION_NAME,
    "description": "Interpret service rep input and convert it to structured ticket actions",
    "parameters": {
        "type": "object",
        "properties": {
            "actions": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "action_type": {
                            "type": "string",
                            "enum": [t.value for t in ActionType],
                            "description": "Type of action to perform",
                        },
                        "customer_name": {
                            "type": "string",
                            "description": (
                                "The customer as mentioned in the input (full name, "
                                "first name, 'Mr. Smith' or a description such as "
                                "'the guy with the broken forklift')"
                            ),
                        },
                        "note_content": {
                            "type": "string",
                            "description": "Professional wording of the note to add",
                        },
                        "is_customer_visible": {
                            "type": "boolean",
                            "description": (
                                "True only when the note is clearly meant for the customer"
                            ),
                        },
                        "status_update": {
                            "type": "string",
                            "enum": [s.value for s in TicketStatus],
                            "description": "New status for the ticket",
                        },
                        "tags_to_add": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Tags to add (equipment, part, issue)",
                        },
                        "tags_to_remove": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Tags to remove",
                        },
                        "assign_to": {
                            "type": "string",
                            "description": (
                                "'me' for self-assignment, otherwise the representative's name"
                            ),
                        },
                        "ticket_keywords": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": (
                                "Equipment or issue words that identify the ticket"
                            ),
                        },
                        "confidence_score": {
                            "type": "number",
                            "description": "How confident you are in this interpretation (0-1)",
                        },
                    },
                    "required": ["action_type", "customer_name", "confidence_score"],
                },
            }
        },
        "required": ["actions"],
    },
}
