"""User profile entity — customers, service representatives and admins."""

from dataclasses import dataclass, field

from autocrm.domain.entities.preferences import UserAIPreferences
from autocrm.domain.value_objects.enums import UserRole


@dataclass
class UserProfile:
    id: str | None
    full_name: str
    role: UserRole
    company: str | None = None
    ai_preferences: UserAIPreferences = field(default_factory=UserAIPreferences)

    @property
    def first_name(self) -> str:
        parts = self.full_name.split()
        return parts[0] if parts else ""

    @property
    def last_name(self) -> str:
        parts = self.full_name.split()
        return parts[-1] if len(parts) > 1 else ""

    def is_customer(self) -> bool:
        return self.role == UserRole.CUSTOMER

    def can_submit_actions(self) -> bool:
        return self.role == UserRole.SERVICE_REP

    def can_manage_tickets(self) -> bool:
        return self.role in (UserRole.SERVICE_REP, UserRole.ADMIN)

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
