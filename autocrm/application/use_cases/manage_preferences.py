"""Read and update a user's AI assistant preferences."""

from __future__ import annotations

import logging

from autocrm.application.ports.user_repo import UserRepository
from autocrm.domain.entities.preferences import UserAIPreferences
from autocrm.domain.errors import UserNotFoundError

logger = logging.getLogger(__name__)


class ManagePreferencesUseCase:
    def __init__(self, user_repo: UserRepository):
        self._users = user_repo

    async def get(self, user_id: str) -> UserAIPreferences:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        return user.ai_preferences

    async def update(self, user_id: str, preferences: UserAIPreferences) -> UserAIPreferences:
        """Replace the stored preferences.

        Existing ActionRecords keep the ``requires_approval`` they were
        created with.
        """
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        saved = await self._users.update_preferences(user.id, preferences)
        logger.info(
            "Preferences for %s updated (requireApproval=%s, voice=%s, notes=%s)",
            user.id, saved.require_approval, saved.enable_voice_input,
            saved.default_note_visibility.value,
        )
        return saved

    async def patch(self, user_id: str, changes: dict) -> UserAIPreferences:
        """Merge camelCase *changes* onto the stored preferences."""
        current = await self.get(user_id)
        merged = UserAIPreferences.from_dict({**current.to_dict(), **changes})
        return await self.update(user_id, merged)
