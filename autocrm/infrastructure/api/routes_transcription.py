"""Voice input — base64 audio in, text out."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from autocrm.application.use_cases.transcribe_audio import TranscribeAudioUseCase
from autocrm.infrastructure.api.dependencies import get_transcribe_uc

router = APIRouter(tags=["transcription"])


class TranscribeRequest(BaseModel):
    audio_base64: str
    user_id: str | None = None


@router.post("/transcribe")
async def transcribe(
    body: TranscribeRequest,
    uc: TranscribeAudioUseCase = Depends(get_transcribe_uc),
):
    text = await uc.execute(body.audio_base64, body.user_id)
    return {"text": text}
