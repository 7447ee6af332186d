"""ApprovalGatePolicy — immediate vs. human-gated execution, and who may decide."""

from autocrm.domain.entities.action_record import ActionRecord
from autocrm.domain.entities.preferences import UserAIPreferences
from autocrm.domain.entities.user import UserProfile
from autocrm.domain.errors import AuthorizationError


def should_auto_execute(record: ActionRecord, preferences: UserAIPreferences) -> bool:
    """Evaluated once per record, at creation, with the acting user's current preferences.

    The negation is frozen into ``ActionRecord.requires_approval``; editing the
    preference later does not touch existing records.
    """
    if not record.is_pending():
        return False
    return not preferences.require_approval


def can_decide(user: UserProfile, record: ActionRecord) -> bool:
    """Owners with ticket-management rights may decide; admins may decide any record."""
    if not user.can_manage_tickets():
        return False
    return user.is_admin() or user.id == record.user_id


def ensure_can_decide(user: UserProfile, record: ActionRecord) -> None:
    if not can_decide(user, record):
        raise AuthorizationError(
            f"User {user.id} ({user.role.value}) may not approve or reject action {record.id}"
        )
