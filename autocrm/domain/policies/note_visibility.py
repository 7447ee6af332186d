"""NoteVisibilityPolicy — who sees an interpreted note."""

from autocrm.domain.entities.preferences import UserAIPreferences
from autocrm.domain.entities.structured_action import StructuredAction
from autocrm.domain.value_objects.enums import NoteVisibility


def resolve_note_visibility(action: StructuredAction, preferences: UserAIPreferences) -> bool:
    """Return True when the note should be customer-visible.

    Precedence: an explicit interpreter decision wins; otherwise the user's
    ``defaultNoteVisibility`` applies.
    """
    if action.is_customer_visible is not None:
        return action.is_customer_visible
    return preferences.default_note_visibility == NoteVisibility.CUSTOMER
