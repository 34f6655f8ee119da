import threading
from datetime import timedelta

import pytest

from conftest import SPOKEN_TONE, reply
from interview_session import NEUTRAL_TONE
from services.errors import (
    EmptyInterview,
    GatewayTransportFailure,
    InvalidAudioPayload,
    NoActiveProblem,
    SessionNotFound,
    SessionStateConflict,
    UnsupportedInterviewKind,
)
from services.resume import resume_from_text
from session_reports import SessionReportStore
from speech import FALLBACK_TRANSCRIPT


RESUME = resume_from_text("Jane Doe\nSoftware engineer, 3 years of Python.")


def _create(orchestrator, company, kind="dsa"):
    return orchestrator.create_session(kind=kind, company=company, resume=RESUME)


def test_create_session(build_orchestrator, company):
    created = _create(build_orchestrator(), company, kind="resume_cs_fundamentals")
    assert created.session_id == "session-1"
    assert created.candidate_name == "Jane Doe"
    assert created.interview_kind == "resume_cs"
    assert created.model_dump(by_alias=True)["sessionId"] == "session-1"


def test_unknown_kind_is_rejected(build_orchestrator, company):
    with pytest.raises(UnsupportedInterviewKind):
        _create(build_orchestrator(), company, kind="pair_programming")


def test_dsa_happy_path(build_orchestrator, company, gateways, tmp_db):
    gateways.question.replies = [
        reply("Hi Jane, tell me about yourself."),
        reply("Great, let's move to the next problem.", shouldMoveToNextProblem=True),
        reply("Why did you pick a hash map?"),
    ]
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company).session_id

    started = orchestrator.start_interview(session_id)
    assert started.round == 1
    assert started.total_problems == 3
    assert len(started.dsa_problems) == 3

    answered = orchestrator.submit_answer(session_id, b"voice")
    assert answered.round == 2
    assert answered.phase == "problem_solving"
    assert answered.transcript == "I would use a hash map."
    assert answered.tone == SPOKEN_TONE
    assert answered.current_problem_index == 1
    assert answered.current_problem == started.dsa_problems[1]

    current = orchestrator.get_current_problem(session_id)
    assert current.current_index == 1
    assert current.is_last_problem is False

    submitted = orchestrator.submit_code(session_id, "def solve(nums): ...", "python")
    assert submitted.evaluation.score == 40
    assert submitted.evaluation.next_action.action == "advanceToNextProblem"
    assert submitted.next_question == "Why did you pick a hash map?"
    assert submitted.round == 3
    assert (submitted.current_index, submitted.total_problems) == (1, 3)

    problems = orchestrator.get_problems(session_id)
    assert problems.total_problems == 3
    assert problems.current_problem_index == 1

    finalized = orchestrator.finalize(session_id)
    assert finalized.summary_text == "Strong candidate. Recommend a second round."
    assert (finalized.total_rounds, finalized.question_count) == (3, 3)
    assert (finalized.response_count, finalized.tone_sample_count) == (2, 1)

    with pytest.raises(SessionNotFound):
        orchestrator.get_problems(session_id)
    report = SessionReportStore(tmp_db).load(session_id)
    assert report is not None
    assert report.candidate_name == "Jane Doe"
    assert len(report.evaluations) == 1
    assert report.exchanges[0].answer == "I would use a hash map."
    assert report.exchanges[1].answer.startswith("Code submitted for problem:")


def test_transcription_failure_still_advances(build_orchestrator, company, gateways):
    gateways.transcriber.fail = True
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company, kind="hr").session_id
    orchestrator.start_interview(session_id)
    answered = orchestrator.submit_answer(session_id, b"voice")
    assert answered.transcript == FALLBACK_TRANSCRIPT
    assert answered.tone == SPOKEN_TONE
    assert answered.round == 2


def test_prosody_failure_uses_neutral_tone(build_orchestrator, company, gateways):
    gateways.prosody.fail = True
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company, kind="hr").session_id
    orchestrator.start_interview(session_id)
    assert orchestrator.submit_answer(session_id, b"voice").tone == NEUTRAL_TONE


def test_time_budget_triggers_wrap_up(build_orchestrator, company, clock):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company, kind="technical_hr").session_id
    orchestrator.start_interview(session_id)
    clock.advance(5)
    assert orchestrator.submit_answer(session_id, b"voice").phase == "technical_assessment"
    clock.advance(13)
    answered = orchestrator.submit_answer(session_id, b"voice")
    assert answered.phase == "wrap_up"
    assert answered.is_wrap_up is True
    assert answered.elapsed_minutes == 18
    assert answered.remaining_minutes == 2


def test_gateway_failure_is_atomic(build_orchestrator, company, gateways):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company).session_id
    orchestrator.start_interview(session_id)
    gateways.question.fail = True
    with pytest.raises(GatewayTransportFailure):
        orchestrator.submit_answer(session_id, b"voice")
    gateways.question.fail = False
    answered = orchestrator.submit_answer(session_id, b"voice")
    assert answered.round == 2


def test_start_failure_leaves_session_pending(build_orchestrator, company, gateways):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company).session_id
    gateways.question.fail = True
    with pytest.raises(GatewayTransportFailure):
        orchestrator.start_interview(session_id)
    gateways.question.fail = False
    assert orchestrator.start_interview(session_id).round == 1


def test_lifecycle_conflicts(build_orchestrator, company):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company, kind="hr").session_id
    with pytest.raises(SessionStateConflict):
        orchestrator.submit_answer(session_id, b"voice")
    orchestrator.start_interview(session_id)
    with pytest.raises(SessionStateConflict):
        orchestrator.start_interview(session_id)


def test_answer_before_start_calls_no_gateway(build_orchestrator, company, gateways):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company, kind="hr").session_id
    with pytest.raises(SessionStateConflict):
        orchestrator.submit_answer(session_id, b"voice")
    assert (gateways.transcriber.calls, gateways.prosody.calls) == (0, 0)
    assert gateways.question.calls == []


def test_code_before_start_calls_no_gateway(build_orchestrator, company, gateways):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company, kind="dsa").session_id
    with pytest.raises(SessionStateConflict):
        orchestrator.submit_code(session_id, "print(1)")
    assert gateways.evaluation.calls == []


def test_invalid_audio_rejected(build_orchestrator, company, gateways):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company).session_id
    orchestrator.start_interview(session_id)
    with pytest.raises(InvalidAudioPayload):
        orchestrator.submit_answer(session_id, b"")
    assert gateways.transcriber.calls == 0


def test_unknown_session_everywhere(build_orchestrator):
    orchestrator = build_orchestrator()
    with pytest.raises(SessionNotFound):
        orchestrator.start_interview("nope")
    with pytest.raises(SessionNotFound):
        orchestrator.submit_answer("nope", b"voice")
    with pytest.raises(SessionNotFound):
        orchestrator.submit_code("nope", "code")
    with pytest.raises(SessionNotFound):
        orchestrator.finalize("nope")
    with pytest.raises(KeyError):
        orchestrator.get_current_problem("nope")


def test_code_without_problem(build_orchestrator, company):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company, kind="hr").session_id
    orchestrator.start_interview(session_id)
    with pytest.raises(NoActiveProblem):
        orchestrator.submit_code(session_id, "print(1)")
    with pytest.raises(NoActiveProblem):
        orchestrator.get_problems(session_id)


def test_finalize_without_questions_keeps_session(build_orchestrator, company):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company, kind="hr").session_id
    with pytest.raises(EmptyInterview):
        orchestrator.finalize(session_id)
    assert orchestrator.start_interview(session_id).round == 1


def test_finalize_gateway_failure_keeps_session(build_orchestrator, company, gateways):
    orchestrator = build_orchestrator(reports=False)
    session_id = _create(orchestrator, company, kind="hr").session_id
    orchestrator.start_interview(session_id)
    gateways.summary.fail = True
    with pytest.raises(GatewayTransportFailure):
        orchestrator.finalize(session_id)
    gateways.summary.fail = False
    assert orchestrator.finalize(session_id).question_count == 1


def test_terminate_is_idempotent(build_orchestrator, company):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company, kind="hr").session_id
    assert orchestrator.terminate(session_id).ok is True
    assert orchestrator.terminate(session_id).ok is True
    assert orchestrator.terminate("never-existed").ok is True
    with pytest.raises(SessionNotFound):
        orchestrator.start_interview(session_id)


def test_purge_idle(build_orchestrator, company, clock):
    orchestrator = build_orchestrator()
    stale = _create(orchestrator, company, kind="hr").session_id
    clock.advance(60)
    fresh = _create(orchestrator, company, kind="hr").session_id
    clock.advance(40)
    assert orchestrator.purge_idle() == [stale]
    assert orchestrator.purge_idle(timedelta(minutes=30)) == [fresh]


def test_terminate_does_not_wait_for_inflight_question(build_orchestrator, company, gateways):
    orchestrator = build_orchestrator()
    session_id = _create(orchestrator, company, kind="hr").session_id
    asking, release, terminated = threading.Event(), threading.Event(), threading.Event()
    scripted_ask = gateways.question.ask

    def slow_ask(prompt, *, system_prompt=None):
        asking.set()
        release.wait(timeout=5)
        return scripted_ask(prompt, system_prompt=system_prompt)

    def abandon():
        orchestrator.terminate(session_id)
        terminated.set()

    gateways.question.ask = slow_ask
    starter = threading.Thread(target=orchestrator.start_interview, args=(session_id,))
    starter.start()
    try:
        assert asking.wait(timeout=5)
        threading.Thread(target=abandon).start()
        assert terminated.wait(timeout=2)
        with pytest.raises(SessionNotFound):
            orchestrator.get_problems(session_id)
    finally:
        release.set()
        starter.join(timeout=5)
