"""Port interface for user profile persistence."""

from abc import ABC, abstractmethod

from autocrm.domain.entities.preferences import UserAIPreferences
from autocrm.domain.entities.user import UserProfile
from autocrm.domain.value_objects.enums import UserRole


class UserRepository(ABC):
    @abstractmethod
    async def save(self, user: UserProfile) -> UserProfile:
        ...

    @abstractmethod
    async def get_by_id(self, user_id: str) -> UserProfile | None:
        ...

    @abstractmethod
    async def get_by_ids(self, user_ids: list[str]) -> list[UserProfile]:
        ...

    @abstractmethod
    async def get_by_role(self, role: UserRole) -> list[UserProfile]:
        ...

    @abstractmethod
    async def get_all(self) -> list[UserProfile]:
        ...

    @abstractmethod
    async def update_preferences(
        self, user_id: str, preferences: UserAIPreferences
    ) -> UserAIPreferences:
        ...
