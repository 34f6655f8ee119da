from __future__ import annotations  # Finalized interview report models

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from interview_session.models import CodeEvaluation, InterviewSession, ToneVector


class SessionExchange(BaseModel):  # One question and the answer recorded against it
    round: int
    question: str
    answer: str = ""
    problem_title: Optional[str] = None


class SessionReport(BaseModel):  # Durable snapshot written before a session is deleted
    session_id: str
    interview_kind: str
    candidate_name: str
    company_name: str
    role: str
    summary_text: str
    total_rounds: int
    question_count: int
    response_count: int
    tone_sample_count: int
    average_tone: Optional[ToneVector] = None
    exchanges: List[SessionExchange] = Field(default_factory=list)
    evaluations: List[CodeEvaluation] = Field(default_factory=list)
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat(timespec="seconds"))


def average_tone(tones: List[ToneVector]) -> Optional[ToneVector]:  # Per-dimension mean, None without samples
    if not tones:
        return None
    count = len(tones)
    return ToneVector(
        confidence=sum(tone.confidence for tone in tones) / count,
        stress=sum(tone.stress for tone in tones) / count,
        engagement=sum(tone.engagement for tone in tones) / count,
        clarity=sum(tone.clarity for tone in tones) / count,
        pace=sum(tone.pace for tone in tones) / count,
        volume=sum(tone.volume for tone in tones) / count,
    )


def build_report(session: InterviewSession, summary_text: str) -> SessionReport:
    exchanges = [
        SessionExchange(
            round=record.round,
            question=record.text,
            answer=session.responses[index] if index < len(session.responses) else "",
            problem_title=record.problem_title,
        )
        for index, record in enumerate(session.question_history)
    ]
    return SessionReport(
        session_id=session.session_id,
        interview_kind=session.kind,
        candidate_name=session.candidate.name,
        company_name=session.company.name,
        role=session.company.role,
        summary_text=summary_text,
        total_rounds=session.round,
        question_count=len(session.question_history),
        response_count=len(session.responses),
        tone_sample_count=len(session.tone_history),
        average_tone=average_tone(session.tone_history),
        exchanges=exchanges,
        evaluations=list(session.evaluations),
    )


__all__ = ["SessionExchange", "SessionReport", "average_tone", "build_report"]
