"""Audio ingest: one spoken answer fanned out to transcription and prosody."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Tuple

from config.settings import settings
from interview_session.models import NEUTRAL_TONE, ToneVector
from observability import log_event, span
from services.errors import InvalidAudioPayload

from .prosody import ProsodyGateway
from .transcription import TranscriptionGateway


logger = logging.getLogger(__name__)

FALLBACK_TRANSCRIPT = "Could not transcribe audio. Please try speaking again."


class AudioIngestCoordinator:
    """Runs both audio gateways concurrently and joins them with fallbacks.

    Each gateway settles on its own: a failure in one never cancels or
    discards the other's result. Only an empty or oversize payload is
    rejected, and that happens before either gateway is called.
    """

    def __init__(
        self,
        transcriber: TranscriptionGateway,
        prosody: ProsodyGateway,
        *,
        max_bytes: Optional[int] = None,
    ) -> None:
        self._transcriber = transcriber
        self._prosody = prosody
        self._max_bytes = max_bytes or settings.MAX_AUDIO_BYTES

    def validate(self, audio: bytes) -> None:
        if not audio:
            raise InvalidAudioPayload("audio payload is empty")
        if len(audio) > self._max_bytes:
            raise InvalidAudioPayload(f"audio payload too large: {len(audio)} bytes (max {self._max_bytes})")

    def ingest(self, audio: bytes, *, session_id: str = "-") -> Tuple[str, ToneVector]:
        self.validate(audio)
        # Workers are per answer, never shared across sessions.
        with span(session_id, "audio_ingest"), ThreadPoolExecutor(max_workers=2, thread_name_prefix="audio-ingest") as pool:
            transcript_future = pool.submit(self._transcriber.transcribe, audio)
            tone_future = pool.submit(self._prosody.analyze, audio)
            transcript = self._settle_transcript(transcript_future, session_id)
            tone = self._settle_tone(tone_future, session_id)
        return transcript, tone

    def _settle_transcript(self, future: "Future[str]", session_id: str) -> str:
        try:
            text = future.result()
        except Exception as exc:  # any transcription failure degrades to the fallback text
            logger.warning("Transcription failed for session %s: %s", session_id, exc)
            log_event("audio_fallback", session_id, gateway="transcription", error=str(exc))
            return FALLBACK_TRANSCRIPT
        return text if isinstance(text, str) else str(text)

    def _settle_tone(self, future: "Future[ToneVector]", session_id: str) -> ToneVector:
        try:
            tone = future.result()
        except Exception as exc:  # any prosody failure degrades to the neutral vector
            logger.warning("Prosody analysis failed for session %s: %s", session_id, exc)
            log_event("audio_fallback", session_id, gateway="prosody", error=str(exc))
            return NEUTRAL_TONE
        if not isinstance(tone, ToneVector):
            log_event("audio_fallback", session_id, gateway="prosody", error="unexpected payload")
            return NEUTRAL_TONE
        return tone


__all__ = ["AudioIngestCoordinator", "FALLBACK_TRANSCRIPT"]
