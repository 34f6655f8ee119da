import json
import os
import random
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

from config.settings import settings
from code_evaluation import CodeEvaluationEngine
from dsa_catalog import ProblemCatalog
from flow_manager import InterviewFlowMachine
from interview_session import CompanyProfile, InMemorySessionStore, ToneVector
from llm_gateway import LlmGatewayError
from services.orchestrator import InterviewOrchestrator
from session_reports import SessionReportStore
from speech import AudioIngestCoordinator


START = datetime(2025, 1, 6, 9, 0, 0)
SPOKEN_TONE = ToneVector(confidence=6, stress=4, engagement=7, clarity=8, pace=6, volume=7)


def reply(question: str, **flags) -> str:
    payload = {"question": question, "feedback": {"score": 30, "overallFeedback": "fine"}}
    payload.update(flags)
    return json.dumps(payload)


class FakeModel:  # Scripted LanguageModel; the last reply repeats once the script runs out
    def __init__(self, *replies: str) -> None:
        self.replies = list(replies) or [reply("Tell me more.")]
        self.calls: list[tuple[str, str]] = []
        self.fail = False

    def ask(self, prompt, *, system_prompt=None):
        if self.fail:
            raise LlmGatewayError("LLM transport failed")
        self.calls.append((prompt, system_prompt or ""))
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]


class FakeTranscriber:
    def __init__(self, text: str = "I would use a hash map.") -> None:
        self.text = text
        self.fail = False
        self.calls = 0

    def transcribe(self, audio):
        self.calls += 1
        if self.fail:
            raise RuntimeError("transcription provider down")
        return self.text


class FakeProsody:
    def __init__(self, tone: ToneVector = SPOKEN_TONE) -> None:
        self.tone = tone
        self.fail = False
        self.calls = 0

    def analyze(self, audio):
        self.calls += 1
        if self.fail:
            raise RuntimeError("prosody service down")
        return self.tone


class Clock:  # Injected "now" that tests move by hand
    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, minutes: float) -> None:
        self.current = self.current + timedelta(minutes=minutes)


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    try:
        yield db_path
    finally:
        td.cleanup()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def catalog():
    return ProblemCatalog.from_path(Path(settings.DSA_CATALOG_PATH), rng=random.Random(7))


@pytest.fixture
def company():
    return CompanyProfile(name="Acme", organization_type="enterprise", role="Backend Engineer", level="Mid", industry="fintech")


@pytest.fixture
def gateways():
    class Gateways:
        question = FakeModel()
        summary = FakeModel("Strong candidate. Recommend a second round.")
        evaluation = FakeModel('{"score": 40, "overallFeedback": "Correct and efficient.", "timeComplexity": "O(n)", "spaceComplexity": "O(n)"}')
        transcriber = FakeTranscriber()
        prosody = FakeProsody()

    return Gateways()


@pytest.fixture
def build_orchestrator(gateways, catalog, clock, tmp_db):
    def _build(*, reports=True, problem_count=3):
        machine = InterviewFlowMachine(
            gateways.question,
            catalog,
            summary_model=gateways.summary,
            problem_count=problem_count,
            now=clock,
        )
        ids = iter(f"session-{index}" for index in range(1, 100))
        return InterviewOrchestrator(
            InMemorySessionStore(),
            machine,
            CodeEvaluationEngine(gateways.evaluation, now=clock),
            AudioIngestCoordinator(gateways.transcriber, gateways.prosody),
            reports=SessionReportStore(tmp_db) if reports else None,
            now=clock,
            id_factory=lambda: next(ids),
        )

    return _build
