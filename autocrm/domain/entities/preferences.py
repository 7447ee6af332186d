"""Per-user AI assistant preferences."""

from __future__ import annotations

from dataclasses import dataclass

from autocrm.domain.value_objects.enums import NoteVisibility


def _flag(data: dict, key: str, default: bool) -> bool:
    # Only real JSON booleans count; "false" and 0 fall back to the default
    value = data.get(key)
    return value if isinstance(value, bool) else default


@dataclass
class UserAIPreferences:
    require_approval: bool = True
    enable_voice_input: bool = False
    default_note_visibility: NoteVisibility = NoteVisibility.INTERNAL

    @classmethod
    def from_dict(cls, data: dict | None) -> UserAIPreferences:
        """Build from the stored camelCase JSON document; missing keys use defaults."""
        if not data:
            return cls()
        visibility = data.get("defaultNoteVisibility", NoteVisibility.INTERNAL.value)
        try:
            default_visibility = NoteVisibility(visibility)
        except ValueError:
            default_visibility = NoteVisibility.INTERNAL
        return cls(
            require_approval=_flag(data, "requireApproval", True),
            enable_voice_input=_flag(data, "enableVoiceInput", False),
            default_note_visibility=default_visibility,
        )

    def to_dict(self) -> dict:
        return {
            "requireApproval": self.require_approval,
            "enableVoiceInput": self.enable_voice_input,
            "defaultNoteVisibility": self.default_note_visibility.value,
        }
