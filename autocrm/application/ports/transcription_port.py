"""Port interface for speech-to-text."""

from abc import ABC, abstractmethod


class TranscriptionPort(ABC):
    @abstractmethod
    async def transcribe(self, audio: bytes, prompt: str | None = None) -> str:
        """Transcribe *audio*; *prompt* lists names that bias recognition.

        Raises:
            TranscriptionError: the engine is unavailable or rejected the audio.
        """
        ...
