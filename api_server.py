from __future__ import annotations  # FastAPI server exposing the interview session orchestrator

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from code_evaluation import CodeEvaluationEngine
from config import CODE_EVALUATION_TARGET, QUESTION_TARGET, SUMMARY_TARGET, LlmRoute, load_config, resolve_registry
from config.settings import settings
from dsa_catalog import ProblemCatalog
from flow_manager import InterviewFlowMachine
from interview_session import InMemorySessionStore
from llm_gateway import RouteGateway
from services.orchestrator import InterviewOrchestrator
from session_reports import SessionReportStore
from speech import AssemblyAITranscriber, AudioIngestCoordinator, HttpProsodyAnalyzer


logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parent


def _resolve(path: str) -> Path:  # Relative settings paths are anchored at the repository root
    candidate = Path(path)
    return candidate if candidate.is_absolute() else ROOT / candidate


def _bounded(route: LlmRoute) -> LlmRoute:
    if route.timeout_s <= settings.LLM_TIMEOUT_S:
        return route
    return route.model_copy(update={"timeout_s": settings.LLM_TIMEOUT_S})


def build_orchestrator(config_path: Optional[Path] = None) -> InterviewOrchestrator:
    """Assemble gateways, catalog, flow machine and stores from settings."""

    cfg = load_config(config_path or _resolve(settings.CONFIG_PATH))
    routes = {target: _bounded(route) for target, route in resolve_registry(cfg).items()}
    catalog = ProblemCatalog.from_path(_resolve(settings.DSA_CATALOG_PATH))
    if not len(catalog):
        logger.warning("DSA catalog is empty; DSA interviews will run without problems")

    machine = InterviewFlowMachine(
        RouteGateway(routes[QUESTION_TARGET]),
        catalog,
        summary_model=RouteGateway(routes[SUMMARY_TARGET]),
    )
    evaluator = CodeEvaluationEngine(RouteGateway(routes[CODE_EVALUATION_TARGET]))
    audio = AudioIngestCoordinator(AssemblyAITranscriber(), HttpProsodyAnalyzer())
    reports = SessionReportStore(_resolve(settings.DB_PATH))
    logger.info(
        "Orchestrator ready: %d problems, question route %s, summary route %s",
        len(catalog),
        routes[QUESTION_TARGET].name,
        routes[SUMMARY_TARGET].name,
    )
    return InterviewOrchestrator(InMemorySessionStore(), machine, evaluator, audio, reports=reports)


def create_app(orchestrator: Optional[InterviewOrchestrator] = None) -> FastAPI:
    app = FastAPI(title="Interview Session Orchestrator API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"]
    )
    app.state.orchestrator = orchestrator or build_orchestrator()
    app.include_router(router)

    @app.get("/health")
    def health() -> dict:  # Liveness probe
        return {"status": "ok"}

    return app


app = create_app()
