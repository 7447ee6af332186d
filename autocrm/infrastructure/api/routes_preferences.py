"""Per-user AI assistant preferences."""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from autocrm.adapters.persistence.database import get_session
from autocrm.application.use_cases.manage_preferences import ManagePreferencesUseCase
from autocrm.infrastructure.api.dependencies import get_preferences_uc

router = APIRouter(prefix="/users", tags=["preferences"])


class AIPreferencesBody(BaseModel):
    requireApproval: Optional[bool] = None
    enableVoiceInput: Optional[bool] = None
    defaultNoteVisibility: Optional[Literal["internal", "customer"]] = None


@router.get("/{user_id}/ai-preferences")
async def get_preferences(
    user_id: str,
    uc: ManagePreferencesUseCase = Depends(get_preferences_uc),
):
    prefs = await uc.get(user_id)
    return prefs.to_dict()


@router.put("/{user_id}/ai-preferences")
async def update_preferences(
    user_id: str,
    body: AIPreferencesBody,
    uc: ManagePreferencesUseCase = Depends(get_preferences_uc),
    session: AsyncSession = Depends(get_session),
):
    """Change the given fields; omitted ones keep their stored value."""
    prefs = await uc.patch(user_id, body.model_dump(exclude_none=True))
    await session.commit()
    return prefs.to_dict()
