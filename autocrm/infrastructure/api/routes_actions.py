"""AI action endpoints — submit free text, approve/reject, history."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from autocrm.adapters.persistence.database import get_session
from autocrm.application.use_cases.decide_action import DecideActionUseCase
from autocrm.application.use_cases.execute_action import ExecutionResult
from autocrm.application.use_cases.list_actions import ActionHistoryUseCase, HistoryEntry
from autocrm.application.use_cases.submit_action import SubmitActionUseCase
from autocrm.domain.entities.action_record import ActionRecord
from autocrm.infrastructure.api.dependencies import (
    get_decide_action_uc,
    get_history_uc,
    get_submit_action_uc,
)

router = APIRouter(prefix="/ai-actions", tags=["ai-actions"])


# ── Request schemas ─────────────────────────────────────────────────

class SubmitActionRequest(BaseModel):
    input_text: str
    user_id: str


class DecideActionRequest(BaseModel):
    action_id: str
    user_id: str
    approve: bool


# ── Endpoints ───────────────────────────────────────────────────────

@router.post("")
async def submit_action(
    body: SubmitActionRequest,
    uc: SubmitActionUseCase = Depends(get_submit_action_uc),
    session: AsyncSession = Depends(get_session),
):
    """Interpret free text into pending (or immediately executed) actions."""
    result = await uc.execute(body.input_text, body.user_id)
    await session.commit()
    return {
        "actions": [_serialize_record(r) for r in result.records],
        "parsed_result": result.parsed_result,
        "requires_approval": result.requires_approval,
        "executions": [_serialize_execution(e) for e in result.executions],
    }


@router.post("/execute")
async def decide_action(
    body: DecideActionRequest,
    uc: DecideActionUseCase = Depends(get_decide_action_uc),
    session: AsyncSession = Depends(get_session),
):
    """Approve (and execute) or reject a pending action."""
    result = await uc.execute(body.action_id, body.user_id, body.approve)
    await session.commit()
    return _serialize_execution(result)


@router.get("")
async def list_actions(
    user_id: str,
    uc: ActionHistoryUseCase = Depends(get_history_uc),
):
    """A user's action history, newest first."""
    entries = await uc.execute(user_id)
    return {
        "total": len(entries),
        "actions": [_serialize_history(e) for e in entries],
    }


# ── Serialization ───────────────────────────────────────────────────

def _serialize_record(r: ActionRecord) -> dict:
    return {
        "id": r.id,
        "user_id": r.user_id,
        "ticket_id": r.ticket_id,
        "input_text": r.input_text,
        "action_type": r.action_type,
        "interpreted_action": r.interpreted_action,
        "status": r.status.value,
        "requires_approval": r.requires_approval,
        "error_message": r.error_message,
        "decided_by": r.decided_by,
        "created_at": r.created_at.isoformat() if r.created_at else None,
        "executed_at": r.executed_at.isoformat() if r.executed_at else None,
    }


def _serialize_execution(e: ExecutionResult) -> dict:
    return {
        "action_id": e.action_id,
        "status": e.status.value,
        "error_message": e.error_message,
    }


def _serialize_history(entry: HistoryEntry) -> dict:
    data = _serialize_record(entry.record)
    if entry.ticket:
        data["ticket"] = {
            "id": entry.ticket.id,
            "title": entry.ticket.title,
            "status": entry.ticket.status.value,
        }
    else:
        data["ticket"] = None
    return data
