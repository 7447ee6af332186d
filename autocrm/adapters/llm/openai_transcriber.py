"""OpenAI adapter — implements TranscriptionPort with the audio transcription API."""

from __future__ import annotations

import logging

from openai import AsyncOpenAI, OpenAIError

from autocrm.application.ports.transcription_port import TranscriptionPort
from autocrm.config import is_openai_key_configured, settings
from autocrm.domain.errors import TranscriptionError

logger = logging.getLogger(__name__)

# Browser MediaRecorder output
AUDIO_FILENAME = "recording.webm"
AUDIO_MIME_TYPE = "audio/webm"


class OpenAITranscriber(TranscriptionPort):
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout_seconds: float | None = None,
    ):
        key = api_key if api_key is not None else settings.openai_api_key
        self._model = model or settings.openai_transcription_model
        if is_openai_key_configured(key):
            self._client = AsyncOpenAI(
                api_key=key,
                timeout=timeout_seconds or settings.transcription_timeout_seconds,
                max_retries=0,
            )
        else:
            self._client = None

    async def transcribe(self, audio: bytes, prompt: str | None = None) -> str:
        if self._client is None:
            raise TranscriptionError("Transcription is not configured (OPENAI_API_KEY is not set)")

        kwargs = {
            "model": self._model,
            "file": (AUDIO_FILENAME, audio, AUDIO_MIME_TYPE),
        }
        if prompt:
            kwargs["prompt"] = prompt

        try:
            result = await self._client.audio.transcriptions.create(**kwargs)
        except OpenAIError as e:
            logger.warning("OpenAI transcription failed: %s", e)
            raise TranscriptionError(f"Transcription failed: {e}") from e

        return result.text or ""
