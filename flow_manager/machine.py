from __future__ import annotations  # Interview flow state machine driving phases, prompts and problem steering

import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from code_evaluation import next_action
from config.settings import settings
from dsa_catalog import ProblemCatalog
from interview_session.models import InterviewSession, ToneVector
from llm_gateway import LanguageModel
from observability import log_event, span
from services.errors import SessionStateConflict

from .models import AdvanceOutcome, AnswerEvidence, CodeEvidence, Evidence, ParsedReply, StartOutcome
from .policy import kind_config, plan_phase, time_budget
from .prompts import continuation_prompt, summary_prompt, welcome_prompt, wrap_up_prompt
from .reply import parse_reply


logger = logging.getLogger(__name__)

SUMMARY_UNAVAILABLE = "Summary unavailable: the language model returned no text."


def code_submission_note(evidence: CodeEvidence) -> str:  # Text stored in responses for a code round
    return f"Code submitted for problem: {evidence.evaluation.problem_title}"


def describe_evidence(evidence: Evidence) -> Tuple[str, Optional[ToneVector]]:  # Prompt text and tone for new evidence
    if isinstance(evidence, AnswerEvidence):
        return evidence.transcript, evidence.tone
    evaluation = evidence.evaluation
    decision = next_action(evaluation.score)
    lines = [
        f"Code submitted for problem {evaluation.problem_title} ({evaluation.language}).",
        f"Evaluation score: {evaluation.score:g}/50. {evaluation.overall_feedback}",
        f"Time complexity: {evaluation.time_complexity}, space complexity: {evaluation.space_complexity}.",
        f"Recommended next action: {decision.action} ({decision.rationale})",
    ]
    if evaluation.weaknesses:
        lines.append("Weaknesses: " + "; ".join(evaluation.weaknesses))
    return " ".join(lines), None


class InterviewFlowMachine:
    """Decides the next question and the state transition for a session.

    Every operation builds its prompt and calls the model before touching the
    session, so a gateway failure leaves the session exactly as it was.
    """

    def __init__(
        self,
        model: LanguageModel,
        catalog: ProblemCatalog,
        *,
        summary_model: Optional[LanguageModel] = None,
        problem_count: Optional[int] = None,
        coding_after_rounds: Optional[int] = None,
        now: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._model = model
        self._summary_model = summary_model or model
        self._catalog = catalog
        self._problem_count = problem_count if problem_count is not None else settings.DSA_PROBLEM_COUNT
        self._coding_after_rounds = coding_after_rounds or settings.CODING_PROBLEM_AFTER_ROUNDS
        self._now = now

    def start(self, session: InterviewSession) -> StartOutcome:
        if session.phase == "terminated" or session.question_history:
            raise SessionStateConflict(f"interview already started: {session.session_id}")
        config = kind_config(session.kind)
        now = self._now()
        problems = self._catalog.select_balanced_set(self._problem_count) if config.uses_coding_problems else []

        system, prompt = welcome_prompt(session, problem_count=len(problems))
        reply = self._ask(session.session_id, "llm.welcome", system, prompt)

        session.phase = "introduction"
        session.started_at = now
        session.last_activity = now
        session.round = 0
        session.dsa_problems = problems
        session.current_problem_index = 0
        record = session.record_question(reply.question)
        log_event("question_asked", session.session_id, round=record.round, phase=session.phase)
        return StartOutcome(
            question=record.text,
            round=record.round,
            phase=session.phase,
            max_duration_minutes=config.max_minutes,
            wrap_up_threshold_minutes=config.wrap_up_minutes,
            dsa_problems=list(problems),
            total_problems=len(problems),
        )

    def ensure_active(self, session: InterviewSession) -> None:  # Raises before any gateway is called
        if session.phase == "terminated":
            raise SessionStateConflict(f"interview terminated: {session.session_id}")
        if session.started_at is None or not session.question_history:
            raise SessionStateConflict(f"interview not started: {session.session_id}")

    def advance(self, session: InterviewSession, evidence: Evidence) -> AdvanceOutcome:
        config = kind_config(session.kind)
        self.ensure_active(session)
        now = self._now()
        budget = time_budget(session.kind, session.started_at, now)
        phase = plan_phase(session.kind, session.phase, budget, len(session.responses) + 1)
        evidence_text, tone = describe_evidence(evidence)

        if phase == "wrap_up":
            system, prompt = wrap_up_prompt(session, budget=budget)
            reply = self._ask(session.session_id, "llm.wrap_up", system, prompt)
        else:
            system, prompt = continuation_prompt(
                session,
                evidence=evidence_text,
                tone=tone,
                budget=budget,
                phase=phase,
                coding_after_rounds=self._coding_after_rounds,
            )
            reply = self._ask(session.session_id, "llm.continue", system, prompt)

        previous_phase = session.phase
        if isinstance(evidence, AnswerEvidence):
            session.responses = [*session.responses, evidence.transcript]
            session.tone_history = [*session.tone_history, evidence.tone]
        else:
            session.responses = [*session.responses, code_submission_note(evidence)]
            session.evaluations = [*session.evaluations, evidence.evaluation]

        problem_advanced = False
        if phase != "wrap_up":
            if reply.should_move_to_next_problem:
                problem_advanced = session.advance_problem()
                if problem_advanced:
                    log_event("problem_advanced", session.session_id, problem_index=session.current_problem_index)
            elif reply.show_coding_problem and config.introduces_coding_problem and not session.dsa_problems:
                session.dsa_problems = self._catalog.select_balanced_set(1)
                session.current_problem_index = 0

        session.phase = phase
        session.last_activity = now
        if phase != previous_phase:
            log_event("phase_changed", session.session_id, phase=phase, previous=previous_phase)
        record = session.record_question(reply.question)
        log_event("question_asked", session.session_id, round=record.round, phase=phase)

        outcome = AdvanceOutcome(
            question=record.text,
            round=record.round,
            phase=phase,
            phase_changed=phase != previous_phase,
            is_wrap_up=phase == "wrap_up",
            should_move_to_next_problem=reply.should_move_to_next_problem,
            problem_advanced=problem_advanced,
            show_coding_problem=reply.show_coding_problem,
            feedback=reply.feedback,
            elapsed_minutes=budget.elapsed_minutes,
            remaining_minutes=budget.remaining_minutes,
        )
        if session.dsa_problems:
            outcome = outcome.model_copy(
                update={
                    "current_problem": session.current_problem,
                    "current_problem_index": session.current_problem_index,
                    "total_problems": len(session.dsa_problems),
                }
            )
        return outcome

    def summarize(self, session: InterviewSession) -> str:
        system, prompt = summary_prompt(session)
        with span(session.session_id, "llm.summary"):
            raw = self._summary_model.ask(prompt, system_prompt=system)
        text = (raw or "").strip()
        return text or SUMMARY_UNAVAILABLE

    def _ask(self, session_id: str, name: str, system: str, prompt: str) -> ParsedReply:
        with span(session_id, name):
            raw = self._model.ask(prompt, system_prompt=system)
        reply = parse_reply(raw)
        if not reply.structured:
            logger.warning("Unstructured interviewer reply for session %s; using cleaned text", session_id)
        return reply


__all__ = [
    "InterviewFlowMachine",
    "SUMMARY_UNAVAILABLE",
    "code_submission_note",
    "describe_evidence",
]
