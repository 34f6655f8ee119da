import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import router


@pytest.fixture
def client(build_orchestrator):
    app = FastAPI()
    app.include_router(router)
    app.state.orchestrator = build_orchestrator()
    return TestClient(app)


def _session(client, kind="hr") -> str:
    resp = client.post("/api/interview-sessions", json={"interviewKind": kind, "resumeText": "Sam Lee"})
    return resp.json()["sessionId"]


def _audio(payload: bytes = b"fake-audio") -> dict:
    return {"audio": ("answer.webm", payload, "audio/webm")}


def test_unknown_session_is_404(client):
    for path in ("start", "finalize"):
        resp = client.post(f"/api/interview-sessions/missing/{path}")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "session not found"}
    assert client.post("/api/interview-sessions/missing/answer", files=_audio()).status_code == 404
    assert client.get("/api/interview-sessions/missing/current-problem").status_code == 404


def test_unsupported_kind_is_400(client):
    resp = client.post("/api/interview-sessions", json={"interviewKind": "system_design"})
    assert resp.status_code == 400
    assert "system_design" in resp.json()["detail"]


def test_empty_audio_is_400(client):
    session_id = _session(client)
    client.post(f"/api/interview-sessions/{session_id}/start")
    resp = client.post(f"/api/interview-sessions/{session_id}/answer", files=_audio(b""))
    assert resp.status_code == 400


def test_code_without_problem_is_400(client):
    session_id = _session(client)
    client.post(f"/api/interview-sessions/{session_id}/start")
    resp = client.post(f"/api/interview-sessions/{session_id}/submit-code", json={"code": "print(1)"})
    assert resp.status_code == 400
    assert client.get(f"/api/interview-sessions/{session_id}/dsa-problems").status_code == 400


def test_blank_code_fails_validation(client):
    session_id = _session(client, kind="dsa")
    resp = client.post(f"/api/interview-sessions/{session_id}/submit-code", json={"code": ""})
    assert resp.status_code == 422


def test_finalize_before_start_is_400(client):
    session_id = _session(client)
    assert client.post(f"/api/interview-sessions/{session_id}/finalize").status_code == 400


def test_second_start_is_409(client):
    session_id = _session(client)
    assert client.post(f"/api/interview-sessions/{session_id}/start").status_code == 200
    assert client.post(f"/api/interview-sessions/{session_id}/start").status_code == 409


def test_gateway_failure_is_502(client, gateways):
    session_id = _session(client)
    gateways.question.fail = True
    resp = client.post(f"/api/interview-sessions/{session_id}/start")
    assert resp.status_code == 502
    gateways.question.fail = False
    assert client.post(f"/api/interview-sessions/{session_id}/start").status_code == 200


def test_empty_resume_upload_is_400(client):
    resp = client.post(
        "/api/interview-sessions/upload-resume",
        files={"resume": ("resume.txt", b"", "text/plain")},
        data={"interviewKind": "hr"},
    )
    assert resp.status_code == 400


def test_missing_orchestrator_is_503():
    app = FastAPI()
    app.include_router(router)
    resp = TestClient(app).post("/api/interview-sessions/anything/terminate")
    assert resp.status_code == 503
