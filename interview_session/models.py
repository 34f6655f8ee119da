"""Interview session aggregate and the value types it owns."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

InterviewKind = Literal["dsa", "resume_cs", "technical_hr", "hr"]
Phase = Literal[
    "introduction",
    "problem_solving",
    "resume_discussion",
    "technical_fundamentals",
    "technical_assessment",
    "behavioral_assessment",
    "cultural_fit",
    "wrap_up",
    "terminated",
]

SESSION_SCHEMA_VERSION = 1


class CompanyProfile(BaseModel):  # Target company and role, fixed per session
    model_config = ConfigDict(frozen=True)

    name: str = "Tech Company"
    organization_type: str = "startup"
    role: str = "Software Development Engineer"
    level: str = "Entry level"
    industry: str = "technology"


class CandidateProfile(BaseModel):  # Resume text plus best-effort display name
    model_config = ConfigDict(frozen=True)

    resume_text: str = ""
    name: str = "Unknown"

    @property
    def display_name(self) -> str:
        if not self.name or self.name == "Unknown":
            return "the candidate"
        return self.name


class SampleCase(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: str
    output: str
    explanation: str = ""


class DSAProblem(BaseModel):  # Catalog entry; never mutated once loaded
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    difficulty: str = "Medium"
    topics: List[str] = Field(default_factory=list)
    slug: str = ""
    input_format: str = ""
    output_format: str = ""
    samples: List[SampleCase] = Field(default_factory=list)


class ToneVector(BaseModel):  # Six prosody scores for one spoken answer
    model_config = ConfigDict(frozen=True)

    confidence: float = Field(ge=1.0, le=10.0)
    stress: float = Field(ge=1.0, le=10.0)
    engagement: float = Field(ge=1.0, le=10.0)
    clarity: float = Field(ge=1.0, le=10.0)
    pace: float = Field(ge=1.0, le=10.0)
    volume: float = Field(ge=1.0, le=10.0)

    def describe(self) -> str:
        return (
            f"Confidence: {self.confidence:.2f}/10, Stress: {self.stress:.2f}/10, "
            f"Engagement: {self.engagement:.2f}/10, Clarity: {self.clarity:.2f}/10, "
            f"Pace: {self.pace:.2f}/10, Volume: {self.volume:.2f}/10"
        )


NEUTRAL_TONE = ToneVector(confidence=7, stress=3, engagement=8, clarity=8, pace=7, volume=8)


class QuestionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    round: int = Field(ge=1)
    text: str
    problem_title: Optional[str] = None


class CodeEvaluation(BaseModel):  # Scored code submission, appended once per submit
    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=50.0)
    overall_feedback: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    problem_title: str
    language: str = "javascript"
    time_complexity: str = "Unknown"
    space_complexity: str = "Unknown"
    created_at: datetime = Field(default_factory=datetime.utcnow)


class InterviewSession(BaseModel):
    """Running state of one interview, owned by the orchestrator.

    The field set is closed (``extra="forbid"``); adding a field means
    bumping ``schema_version``.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    schema_version: int = SESSION_SCHEMA_VERSION
    session_id: str
    company: CompanyProfile
    candidate: CandidateProfile
    kind: InterviewKind

    phase: Phase = "introduction"
    started_at: Optional[datetime] = None
    last_activity: datetime = Field(default_factory=datetime.utcnow)
    round: int = Field(default=0, ge=0)

    question_history: List[QuestionRecord] = Field(default_factory=list)
    responses: List[str] = Field(default_factory=list)
    tone_history: List[ToneVector] = Field(default_factory=list)

    dsa_problems: List[DSAProblem] = Field(default_factory=list)
    current_problem_index: int = Field(default=0, ge=0)
    evaluations: List[CodeEvaluation] = Field(default_factory=list)

    @property
    def current_problem(self) -> Optional[DSAProblem]:
        if not self.dsa_problems or self.current_problem_index >= len(self.dsa_problems):
            return None
        return self.dsa_problems[self.current_problem_index]

    @property
    def is_last_problem(self) -> bool:
        return bool(self.dsa_problems) and self.current_problem_index == len(self.dsa_problems) - 1

    @property
    def last_question(self) -> Optional[QuestionRecord]:
        return self.question_history[-1] if self.question_history else None

    def record_question(self, text: str) -> QuestionRecord:
        """Append the next question; round stays equal to the history length."""

        problem = self.current_problem
        record = QuestionRecord(
            round=len(self.question_history) + 1,
            text=text,
            problem_title=problem.title if problem else None,
        )
        self.question_history = [*self.question_history, record]
        self.round = len(self.question_history)
        return record

    def advance_problem(self) -> bool:
        """Move to the next problem; a request past the last one is a no-op."""

        if self.current_problem_index + 1 < len(self.dsa_problems):
            self.current_problem_index += 1
            return True
        return False


__all__ = [
    "CandidateProfile",
    "CodeEvaluation",
    "CompanyProfile",
    "DSAProblem",
    "InterviewKind",
    "InterviewSession",
    "NEUTRAL_TONE",
    "Phase",
    "QuestionRecord",
    "SESSION_SCHEMA_VERSION",
    "SampleCase",
    "ToneVector",
]
