"""Orchestrator facade: the operations the HTTP layer calls."""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from code_evaluation import CodeEvaluationEngine, NextAction, next_action
from config.settings import settings
from flow_manager import AdvanceOutcome, AnswerEvidence, CodeEvidence, Evidence, InterviewFlowMachine, normalize_kind
from interview_session import (
    CandidateProfile,
    CompanyProfile,
    DSAProblem,
    InterviewSession,
    SessionStore,
    ToneVector,
)
from llm_gateway import LlmGatewayError
from observability import log_event
from session_reports import SessionReportStore, build_report
from speech import AudioIngestCoordinator

from .errors import EmptyInterview, GatewayTransportFailure, NoActiveProblem, SessionNotFound
from .resume import ResumeText


logger = logging.getLogger(__name__)


class FacadeResult(BaseModel):  # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompanyView(FacadeResult):
    name: str
    organization_type: str
    role: str
    level: str
    industry: str


class SessionCreated(FacadeResult):
    session_id: str
    candidate_name: str
    company: CompanyView
    interview_kind: str


class InterviewStarted(FacadeResult):
    question: str
    round: int
    phase: str
    max_duration_minutes: int
    wrap_up_threshold_minutes: int
    dsa_problems: Optional[List[DSAProblem]] = None
    total_problems: Optional[int] = None


class AnswerResult(FacadeResult):
    question: str
    round: int
    phase: str
    is_wrap_up: bool = False
    transcript: str
    tone: ToneVector
    should_move_to_next_problem: bool = False
    show_coding_problem: bool = False
    current_problem: Optional[DSAProblem] = None
    current_problem_index: Optional[int] = None
    total_problems: Optional[int] = None
    elapsed_minutes: int = 0
    remaining_minutes: int = 0


class EvaluationView(FacadeResult):
    score: float
    overall_feedback: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    time_complexity: str = "Unknown"
    space_complexity: str = "Unknown"
    next_action: NextAction


class CodeSubmissionResult(FacadeResult):
    evaluation: EvaluationView
    next_question: str
    round: int
    phase: str
    is_wrap_up: bool = False
    current_problem: Optional[DSAProblem] = None
    current_index: int
    total_problems: int
    is_last_problem: bool
    should_move_to_next_problem: bool = False


class FinalizeResult(FacadeResult):
    summary_text: str
    total_rounds: int
    question_count: int
    response_count: int
    tone_sample_count: int


class TerminateResult(FacadeResult):
    ok: bool = True


class ProblemSet(FacadeResult):
    problems: List[DSAProblem]
    current_problem_index: int
    total_problems: int


class CurrentProblemView(FacadeResult):
    problem: DSAProblem
    current_index: int
    total_problems: int
    is_last_problem: bool


class InterviewOrchestrator:
    """Validates the session, delegates to the flow machine, maps failures.

    Each mutating call holds the store's per-session lock, re-fetches the
    session inside it, and only then talks to the language model; a
    ``LlmGatewayError`` surfaces as ``GatewayTransportFailure`` with the
    session untouched.
    """

    def __init__(
        self,
        store: SessionStore,
        machine: InterviewFlowMachine,
        evaluator: CodeEvaluationEngine,
        audio: AudioIngestCoordinator,
        *,
        reports: Optional[SessionReportStore] = None,
        now: Callable[[], datetime] = datetime.utcnow,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._store = store
        self._machine = machine
        self._evaluator = evaluator
        self._audio = audio
        self._reports = reports
        self._now = now
        self._id_factory = id_factory

    def create_session(self, *, kind: str, company: CompanyProfile, resume: ResumeText) -> SessionCreated:
        interview_kind = normalize_kind(kind)
        session_id = self._id_factory()
        session = InterviewSession(
            session_id=session_id,
            company=company,
            candidate=CandidateProfile(resume_text=resume.text, name=resume.name),
            kind=interview_kind,
            last_activity=self._now(),
        )
        self._store.create(session_id, session)
        log_event("session_created", session_id, interview_kind=interview_kind, company=company.name)
        return SessionCreated(
            session_id=session_id,
            candidate_name=resume.name,
            company=CompanyView(**company.model_dump()),
            interview_kind=interview_kind,
        )

    def start_interview(self, session_id: str) -> InterviewStarted:
        with self._owned(session_id) as session:
            try:
                outcome = self._machine.start(session)
            except LlmGatewayError as exc:
                raise GatewayTransportFailure(str(exc)) from exc
        log_event("interview_started", session_id, phase=outcome.phase, round=outcome.round)
        coding = bool(outcome.dsa_problems)
        return InterviewStarted(
            question=outcome.question,
            round=outcome.round,
            phase=outcome.phase,
            max_duration_minutes=outcome.max_duration_minutes,
            wrap_up_threshold_minutes=outcome.wrap_up_threshold_minutes,
            dsa_problems=outcome.dsa_problems if coding else None,
            total_problems=outcome.total_problems if coding else None,
        )

    def submit_answer(self, session_id: str, audio: bytes) -> AnswerResult:
        self._machine.ensure_active(self._require(session_id))
        self._audio.validate(audio)
        transcript, tone = self._audio.ingest(audio, session_id=session_id)
        log_event("answer_ingested", session_id, chars=len(transcript))
        with self._owned(session_id) as session:
            outcome = self._advance(session, AnswerEvidence(transcript=transcript, tone=tone))
        return AnswerResult(
            question=outcome.question,
            round=outcome.round,
            phase=outcome.phase,
            is_wrap_up=outcome.is_wrap_up,
            transcript=transcript,
            tone=tone,
            should_move_to_next_problem=outcome.should_move_to_next_problem,
            show_coding_problem=outcome.show_coding_problem,
            current_problem=outcome.current_problem,
            current_problem_index=outcome.current_problem_index,
            total_problems=outcome.total_problems,
            elapsed_minutes=outcome.elapsed_minutes,
            remaining_minutes=outcome.remaining_minutes,
        )

    def submit_code(self, session_id: str, code: str, language: str = "javascript") -> CodeSubmissionResult:
        with self._owned(session_id) as session:
            self._machine.ensure_active(session)
            problem = session.current_problem
            if problem is None:
                raise NoActiveProblem(f"no coding problem is active for session {session_id}")
            try:
                evaluation = self._evaluator.evaluate(code, problem, language)
            except LlmGatewayError as exc:
                raise GatewayTransportFailure(str(exc)) from exc
            decision = next_action(evaluation.score)
            log_event("code_evaluated", session_id, score=evaluation.score, action=decision.action)
            outcome = self._advance(session, CodeEvidence(evaluation=evaluation, code=code, language=language))
            current_index = session.current_problem_index
            total = len(session.dsa_problems)
            is_last = session.is_last_problem
        return CodeSubmissionResult(
            evaluation=EvaluationView(
                score=evaluation.score,
                overall_feedback=evaluation.overall_feedback,
                strengths=evaluation.strengths,
                weaknesses=evaluation.weaknesses,
                time_complexity=evaluation.time_complexity,
                space_complexity=evaluation.space_complexity,
                next_action=decision,
            ),
            next_question=outcome.question,
            round=outcome.round,
            phase=outcome.phase,
            is_wrap_up=outcome.is_wrap_up,
            current_problem=outcome.current_problem,
            current_index=current_index,
            total_problems=total,
            is_last_problem=is_last,
            should_move_to_next_problem=outcome.should_move_to_next_problem,
        )

    def finalize(self, session_id: str) -> FinalizeResult:
        with self._owned(session_id) as session:
            if not session.question_history:
                raise EmptyInterview(f"no questions recorded for session {session_id}")
            try:
                summary = self._machine.summarize(session)
            except LlmGatewayError as exc:
                raise GatewayTransportFailure(str(exc)) from exc
            report = build_report(session, summary)
            if self._reports is not None:
                self._reports.save(report)
            self._store.delete(session_id)
        log_event("session_finalized", session_id, round=report.total_rounds, outcome="deleted")
        return FinalizeResult(
            summary_text=summary,
            total_rounds=report.total_rounds,
            question_count=report.question_count,
            response_count=report.response_count,
            tone_sample_count=report.tone_sample_count,
        )

    def terminate(self, session_id: str) -> TerminateResult:
        # Lock-free: only lookups made after this call see the removal.
        removed = self._store.delete(session_id)
        log_event("session_terminated", session_id, outcome="deleted" if removed else "absent")
        return TerminateResult(ok=True)

    def get_problems(self, session_id: str) -> ProblemSet:
        session = self._require(session_id)
        if not session.dsa_problems:
            raise NoActiveProblem(f"session {session_id} has no problem set")
        return ProblemSet(
            problems=list(session.dsa_problems),
            current_problem_index=session.current_problem_index,
            total_problems=len(session.dsa_problems),
        )

    def get_current_problem(self, session_id: str) -> CurrentProblemView:
        session = self._require(session_id)
        problem = session.current_problem
        if problem is None:
            raise NoActiveProblem(f"session {session_id} has no problem set")
        return CurrentProblemView(
            problem=problem,
            current_index=session.current_problem_index,
            total_problems=len(session.dsa_problems),
            is_last_problem=session.is_last_problem,
        )

    def purge_idle(self, max_age: Optional[timedelta] = None) -> List[str]:
        limit = max_age or timedelta(minutes=settings.SESSION_IDLE_MINUTES)
        removed = self._store.purge_idle(limit, now=self._now())
        for session_id in removed:
            log_event("session_terminated", session_id, outcome="idle")
        return removed

    def _require(self, session_id: str) -> InterviewSession:
        session = self._store.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    @contextmanager
    def _owned(self, session_id: str) -> Iterator[InterviewSession]:
        with self._store.hold(session_id):
            yield self._require(session_id)

    def _advance(self, session: InterviewSession, evidence: Evidence) -> AdvanceOutcome:
        try:
            return self._machine.advance(session, evidence)
        except LlmGatewayError as exc:
            raise GatewayTransportFailure(str(exc)) from exc


__all__ = [
    "AnswerResult",
    "CodeSubmissionResult",
    "CompanyView",
    "CurrentProblemView",
    "EvaluationView",
    "FinalizeResult",
    "InterviewOrchestrator",
    "InterviewStarted",
    "ProblemSet",
    "SessionCreated",
    "TerminateResult",
]
