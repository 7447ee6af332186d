"""StructuredAction — one typed instruction extracted from free-text input."""

from __future__ import annotations

from dataclasses import dataclass, field

from autocrm.domain.value_objects.enums import ActionType


@dataclass
class StructuredAction:
    action_type: ActionType
    customer_name: str | None = None
    note_content: str | None = None
    is_customer_visible: bool | None = None  # None = interpreter did not decide
    status_update: str | None = None  # raw value, validated before execution
    tags_to_add: list[str] = field(default_factory=list)
    tags_to_remove: list[str] = field(default_factory=list)
    assign_to: str | None = None
    confidence_score: float = 0.0
    ticket_keywords: list[str] = field(default_factory=list)

    def to_payload(self) -> dict:
        """Serialize for audit storage (``interpreted_action`` column)."""
        payload: dict = {
            "action_type": self.action_type.value,
            "customer_name": self.customer_name,
            "confidence_score": self.confidence_score,
        }
        if self.note_content is not None:
            payload["note_content"] = self.note_content
        if self.is_customer_visible is not None:
            payload["is_customer_visible"] = self.is_customer_visible
        if self.status_update is not None:
            payload["status_update"] = self.status_update
        if self.tags_to_add:
            payload["tags_to_add"] = list(self.tags_to_add)
        if self.tags_to_remove:
            payload["tags_to_remove"] = list(self.tags_to_remove)
        if self.assign_to is not None:
            payload["assign_to"] = self.assign_to
        if self.ticket_keywords:
            payload["ticket_keywords"] = list(self.ticket_keywords)
        return payload

    @classmethod
    def from_payload(cls, action_type: ActionType, payload: dict) -> StructuredAction:
        """Rebuild from a stored payload. Unknown keys are ignored."""
        return cls(
            action_type=action_type,
            customer_name=payload.get("customer_name"),
            note_content=payload.get("note_content"),
            is_customer_visible=payload.get("is_customer_visible"),
            status_update=payload.get("status_update"),
            tags_to_add=list(payload.get("tags_to_add") or []),
            tags_to_remove=list(payload.get("tags_to_remove") or []),
            assign_to=payload.get("assign_to"),
            confidence_score=float(payload.get("confidence_score") or 0.0),
            ticket_keywords=list(payload.get("ticket_keywords") or []),
        )
