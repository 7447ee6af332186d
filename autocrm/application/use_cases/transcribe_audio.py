"""TranscribeAudioUseCase — base64 audio → text for the voice front-end."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging

from autocrm.application.ports.transcription_port import TranscriptionPort
from autocrm.application.ports.user_repo import UserRepository
from autocrm.domain.errors import (
    ActionValidationError,
    AuthorizationError,
    TranscriptionError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

# Whisper ignores prompt text beyond roughly 224 tokens
MAX_HINT_CHARS = 800


def build_name_hint(names: list[str]) -> str | None:
    """Prompt listing known people so the engine spells them correctly."""
    unique = sorted({n.strip() for n in names if n and n.strip()})
    if not unique:
        return None
    hint = "Names that may be mentioned: " + ", ".join(unique) + "."
    return hint[:MAX_HINT_CHARS]


class TranscribeAudioUseCase:
    def __init__(
        self,
        transcriber: TranscriptionPort,
        user_repo: UserRepository,
        timeout_seconds: float = 60.0,
    ):
        self._transcriber = transcriber
        self._users = user_repo
        self._timeout = timeout_seconds

    async def execute(self, audio_base64: str, user_id: str | None = None) -> str:
        """Transcribe base64-encoded audio.

        Raises:
            ActionValidationError: the payload is empty or not valid base64.
            UserNotFoundError: *user_id* was given but does not exist.
            AuthorizationError: the user has voice input turned off.
            TranscriptionError: the engine failed or timed out.
        """
        if user_id:
            user = await self._users.get_by_id(user_id)
            if user is None:
                raise UserNotFoundError(f"User not found: {user_id}")
            if not user.ai_preferences.enable_voice_input:
                raise AuthorizationError("Voice input is disabled for this user")

        audio = _decode(audio_base64)
        hint = build_name_hint([u.full_name for u in await self._users.get_all()])

        try:
            text = await asyncio.wait_for(
                self._transcriber.transcribe(audio, hint), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Transcription timed out after %.1fs", self._timeout)
            raise TranscriptionError(
                f"Transcription timed out after {self._timeout:g} seconds"
            ) from None
        except TranscriptionError as e:
            logger.warning("Transcription failed: %s", e)
            raise
        except Exception as e:
            logger.warning("Transcriber raised %s: %s", e.__class__.__name__, e)
            raise TranscriptionError(f"Transcription failed: {e}") from e

        logger.info("Transcribed %d bytes of audio into %d chars", len(audio), len(text))
        return text.strip()


def _decode(audio_base64: str) -> bytes:
    payload = (audio_base64 or "").strip()
    # Accept data URLs as produced by the browser recorder
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    if not payload:
        raise ActionValidationError("No audio data provided")
    try:
        audio = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ActionValidationError("Audio payload is not valid base64") from None
    if not audio:
        raise ActionValidationError("No audio data provided")
    return audio
