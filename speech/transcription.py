from __future__ import annotations  # Speech-to-text gateway backed by the AssemblyAI REST API

import logging
import os
import time
from typing import Callable, Optional, Protocol

import httpx

from config.settings import settings


logger = logging.getLogger(__name__)

WORD_BOOST = ["interview", "question", "answer", "problem", "solution", "algorithm", "code", "system", "design"]


class TranscriptionError(RuntimeError):  # Transport or provider failure while transcribing
    pass


class TranscriptionGateway(Protocol):  # Audio bytes in, transcript text out
    def transcribe(self, audio: bytes) -> str: ...


class AssemblyAITranscriber:  # Upload, submit, then poll until the transcript settles
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_s: Optional[float] = None,
        poll_interval_s: Optional[float] = None,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._base_url = (base_url or settings.TRANSCRIPTION_BASE_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else os.getenv(settings.TRANSCRIPTION_API_KEY_ENV, "")
        self._timeout_s = timeout_s or settings.TRANSCRIPTION_TIMEOUT_S
        self._poll_interval_s = poll_interval_s if poll_interval_s is not None else settings.TRANSCRIPTION_POLL_INTERVAL_S
        self._client = client
        self._sleep = sleep
        self._clock = clock

    def transcribe(self, audio: bytes) -> str:
        if not self._api_key:
            raise TranscriptionError("transcription API key not configured")
        deadline = self._clock() + self._timeout_s
        client = self._client or httpx.Client(timeout=self._timeout_s)
        try:
            upload_url = self._upload(client, audio)
            transcript_id = self._submit(client, upload_url)
            return self._poll(client, transcript_id, deadline)
        except httpx.HTTPError as exc:
            logger.error("Transcription transport failure: %s", exc)
            raise TranscriptionError("transcription transport failed") from exc
        finally:
            if self._client is None:
                client.close()

    def _headers(self, content_type: str) -> dict[str, str]:
        return {"Authorization": self._api_key, "Content-Type": content_type}

    def _upload(self, client: httpx.Client, audio: bytes) -> str:
        response = client.post(f"{self._base_url}/upload", content=audio, headers=self._headers("application/octet-stream"))
        _raise_for_status(response, "upload")
        upload_url = response.json().get("upload_url")
        if not upload_url:
            raise TranscriptionError("upload response missing upload_url")
        return upload_url

    def _submit(self, client: httpx.Client, upload_url: str) -> str:
        payload = {
            "audio_url": upload_url,
            "language_code": "en",
            "punctuate": True,
            "format_text": True,
            "boost_param": "high",
            "word_boost": WORD_BOOST,
        }
        response = client.post(f"{self._base_url}/transcript", json=payload, headers=self._headers("application/json"))
        _raise_for_status(response, "submit")
        transcript_id = response.json().get("id")
        if not transcript_id:
            raise TranscriptionError("submit response missing transcript id")
        return transcript_id

    def _poll(self, client: httpx.Client, transcript_id: str, deadline: float) -> str:
        url = f"{self._base_url}/transcript/{transcript_id}"
        while self._clock() < deadline:
            response = client.get(url, headers={"Authorization": self._api_key})
            _raise_for_status(response, "poll")
            data = response.json()
            status = data.get("status")
            if status == "completed":
                return str(data.get("text") or "")
            if status == "error":
                raise TranscriptionError(f"transcription failed: {data.get('error') or 'unknown error'}")
            self._sleep(self._poll_interval_s)
        raise TranscriptionError(f"transcription timed out after {self._timeout_s:.0f}s")


def _raise_for_status(response: httpx.Response, step: str) -> None:
    if response.status_code >= 400:
        raise TranscriptionError(f"transcription {step} returned status {response.status_code}")


__all__ = ["AssemblyAITranscriber", "TranscriptionError", "TranscriptionGateway", "WORD_BOOST"]
