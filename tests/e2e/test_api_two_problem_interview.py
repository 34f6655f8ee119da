import random

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import router
from conftest import reply
from dsa_catalog import ProblemCatalog
from interview_session import DSAProblem


@pytest.fixture
def catalog():
    return ProblemCatalog(
        [
            DSAProblem(id="two-sum", title="Two Sum", description="Find two indices summing to target.", topics=["arrays"]),
            DSAProblem(id="valid-parentheses", title="Valid Parentheses", description="Check bracket balance.", topics=["stacks"]),
        ],
        rng=random.Random(3),
    )


@pytest.fixture
def client(build_orchestrator):
    app = FastAPI()
    app.include_router(router)
    app.state.orchestrator = build_orchestrator(problem_count=3)
    return TestClient(app)


def test_two_problem_catalog_start_and_advance(client, gateways):
    gateways.question.replies = [
        reply("Welcome Jane, let's begin with the first problem."),
        reply("Solid solution. Let's look at the next one.", shouldMoveToNextProblem=True),
        reply("How would you test the second solution?"),
    ]
    session_id = client.post("/api/interview-sessions", json={"interviewKind": "dsa", "resumeText": "Jane Doe"}).json()["sessionId"]

    started = client.post(f"/api/interview-sessions/{session_id}/start").json()
    assert started["round"] == 1
    assert started["question"] == "Welcome Jane, let's begin with the first problem."
    assert len(started["dsaProblems"]) == 2
    assert started["totalProblems"] == 2
    current = client.get(f"/api/interview-sessions/{session_id}/current-problem").json()
    assert current["currentIndex"] == 0

    submitted = client.post(
        f"/api/interview-sessions/{session_id}/submit-code",
        json={"code": "def solve(nums, target):\n    return [0, 1]", "language": "python"},
    ).json()
    assert submitted["evaluation"]["score"] == 40
    assert submitted["evaluation"]["nextAction"]["action"] == "advanceToNextProblem"
    assert "Recommended next action: advanceToNextProblem" in gateways.question.calls[-1][0]
    assert (submitted["currentIndex"], submitted["isLastProblem"]) == (1, True)

    answered = client.post(
        f"/api/interview-sessions/{session_id}/answer",
        files={"audio": ("answer.webm", b"fake-audio", "audio/webm")},
    ).json()
    assert answered["currentProblemIndex"] == 1
    assert answered["currentProblem"]["id"] == started["dsaProblems"][1]["id"]
    assert answered["round"] == 3
