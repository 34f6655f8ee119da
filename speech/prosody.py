from __future__ import annotations  # Prosody gateway returning a six-dimension tone vector

import logging
from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import ValidationError

from config.settings import settings
from interview_session.models import ToneVector


logger = logging.getLogger(__name__)

TONE_FIELDS = ("confidence", "stress", "engagement", "clarity", "pace", "volume")


class ProsodyError(RuntimeError):  # Transport or payload failure while analyzing tone
    pass


class ProsodyGateway(Protocol):  # Audio bytes in, ToneVector out
    def analyze(self, audio: bytes) -> ToneVector: ...


def clamp_tone(raw: Dict[str, Any]) -> ToneVector:  # Coerce provider scores into the [1, 10] band
    values: Dict[str, float] = {}
    for field in TONE_FIELDS:
        try:
            value = float(raw[field])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProsodyError(f"prosody payload missing numeric {field}") from exc
        values[field] = max(1.0, min(10.0, value))
    try:
        return ToneVector(**values)
    except ValidationError as exc:
        raise ProsodyError("prosody payload rejected") from exc


class HttpProsodyAnalyzer:  # Posts raw audio to a feature-extraction service
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = (base_url or settings.PROSODY_BASE_URL).rstrip("/")
        self._timeout_s = timeout_s or settings.PROSODY_TIMEOUT_S
        self._client = client

    def analyze(self, audio: bytes) -> ToneVector:
        client = self._client or httpx.Client(timeout=self._timeout_s)
        try:
            response = client.post(
                f"{self._base_url}/analyze",
                content=audio,
                headers={"Content-Type": "application/octet-stream"},
            )
            if response.status_code >= 400:
                raise ProsodyError(f"prosody service returned status {response.status_code}")
            try:
                data = response.json()
            except ValueError as exc:
                raise ProsodyError("prosody payload was not JSON") from exc
        except httpx.HTTPError as exc:
            logger.error("Prosody transport failure: %s", exc)
            raise ProsodyError("prosody transport failed") from exc
        finally:
            if self._client is None:
                client.close()
        if not isinstance(data, dict):
            raise ProsodyError("prosody payload was not an object")
        return clamp_tone(data.get("tone", data))


__all__ = ["HttpProsodyAnalyzer", "ProsodyError", "ProsodyGateway", "TONE_FIELDS", "clamp_tone"]
