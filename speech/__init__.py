"""Audio gateways and the ingest coordinator that joins them."""
from .ingest import FALLBACK_TRANSCRIPT, AudioIngestCoordinator
from .prosody import HttpProsodyAnalyzer, ProsodyError, ProsodyGateway, clamp_tone
from .transcription import AssemblyAITranscriber, TranscriptionError, TranscriptionGateway

__all__ = [
    "AssemblyAITranscriber",
    "AudioIngestCoordinator",
    "FALLBACK_TRANSCRIPT",
    "HttpProsodyAnalyzer",
    "ProsodyError",
    "ProsodyGateway",
    "TranscriptionError",
    "TranscriptionGateway",
    "clamp_tone",
]
