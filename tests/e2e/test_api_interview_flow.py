import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import router
from conftest import reply


@pytest.fixture
def client(build_orchestrator):
    app = FastAPI()
    app.include_router(router)
    app.state.orchestrator = build_orchestrator()
    return TestClient(app)


def _create(client, kind="dsa"):
    resp = client.post(
        "/api/interview-sessions",
        json={
            "interviewKind": kind,
            "company": {"name": "Acme", "organizationType": "enterprise", "role": "Backend Engineer"},
            "resumeText": "Jane Doe\nBackend engineer with five years of Go.",
        },
    )
    assert resp.status_code == 200
    return resp.json()


def test_dsa_interview_end_to_end(client, gateways):
    gateways.question.replies = [
        reply("Hi Jane, welcome to Acme."),
        reply("Nice. On to the next problem.", shouldMoveToNextProblem=True),
        reply("What is the complexity of your solution?"),
    ]
    created = _create(client)
    assert created["candidateName"] == "Jane Doe"
    assert created["interviewKind"] == "dsa"
    assert created["company"] == {
        "name": "Acme",
        "organizationType": "enterprise",
        "role": "Backend Engineer",
        "level": "Entry level",
        "industry": "technology",
    }
    session_id = created["sessionId"]

    started = client.post(f"/api/interview-sessions/{session_id}/start").json()
    assert started["question"] == "Hi Jane, welcome to Acme."
    assert started["round"] == 1
    assert started["maxDurationMinutes"] == 50
    assert started["wrapUpThresholdMinutes"] == 45
    assert started["totalProblems"] == len(started["dsaProblems"]) == 3

    answered = client.post(
        f"/api/interview-sessions/{session_id}/answer",
        files={"audio": ("answer.webm", b"fake-audio", "audio/webm")},
    )
    assert answered.status_code == 200
    body = answered.json()
    assert body["transcript"] == "I would use a hash map."
    assert body["tone"]["confidence"] == 6
    assert body["shouldMoveToNextProblem"] is True
    assert body["currentProblemIndex"] == 1
    assert body["round"] == 2

    current = client.get(f"/api/interview-sessions/{session_id}/current-problem").json()
    assert current["currentIndex"] == 1
    assert current["problem"]["id"] == started["dsaProblems"][1]["id"]

    problems = client.get(f"/api/interview-sessions/{session_id}/dsa-problems").json()
    assert problems["totalProblems"] == 3

    submitted = client.post(
        f"/api/interview-sessions/{session_id}/submit-code",
        json={"code": "def solve(nums):\n    return []", "language": "python"},
    ).json()
    assert submitted["evaluation"]["score"] == 40
    assert submitted["evaluation"]["nextAction"]["action"] == "advanceToNextProblem"
    assert submitted["evaluation"]["timeComplexity"] == "O(n)"
    assert submitted["nextQuestion"] == "What is the complexity of your solution?"
    assert submitted["isLastProblem"] is False

    finalized = client.post(f"/api/interview-sessions/{session_id}/finalize").json()
    assert finalized["summaryText"] == "Strong candidate. Recommend a second round."
    assert finalized["questionCount"] == 3

    gone = client.post(f"/api/interview-sessions/{session_id}/start")
    assert gone.status_code == 404
    assert gone.json()["detail"] == "session not found"


def test_hr_start_omits_problem_fields(client):
    session_id = _create(client, kind="behavioral")["sessionId"]
    started = client.post(f"/api/interview-sessions/{session_id}/start").json()
    assert "dsaProblems" not in started
    assert "totalProblems" not in started
    assert started["maxDurationMinutes"] == 20


def test_upload_resume_creates_session(client):
    resp = client.post(
        "/api/interview-sessions/upload-resume",
        files={"resume": ("resume.txt", b"Ada Lovelace\nAnalytical engines", "text/plain")},
        data={"interviewKind": "technical_behavioral", "companyName": "Babbage Ltd", "role": "Engineer"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["candidateName"] == "Ada Lovelace"
    assert body["interviewKind"] == "technical_hr"
    assert body["company"]["name"] == "Babbage Ltd"


def test_terminate_always_ok(client):
    session_id = _create(client, kind="hr")["sessionId"]
    for _ in range(2):
        resp = client.post(f"/api/interview-sessions/{session_id}/terminate")
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
