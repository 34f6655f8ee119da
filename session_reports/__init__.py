from __future__ import annotations  # Session report package exports

from .models import SessionExchange, SessionReport, average_tone, build_report
from .store import SessionReportStore

__all__ = ["SessionExchange", "SessionReport", "SessionReportStore", "average_tone", "build_report"]
