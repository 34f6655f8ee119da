"""Interview session data model and volatile session registry."""
from .models import (
    NEUTRAL_TONE,
    CandidateProfile,
    CodeEvaluation,
    CompanyProfile,
    DSAProblem,
    InterviewKind,
    InterviewSession,
    Phase,
    QuestionRecord,
    SampleCase,
    ToneVector,
)
from .store import InMemorySessionStore, SessionStore

__all__ = [
    "NEUTRAL_TONE",
    "CandidateProfile",
    "CodeEvaluation",
    "CompanyProfile",
    "DSAProblem",
    "InMemorySessionStore",
    "InterviewKind",
    "InterviewSession",
    "Phase",
    "QuestionRecord",
    "SampleCase",
    "SessionStore",
    "ToneVector",
]
