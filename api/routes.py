"""FastAPI routes for interview session control."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from api.schemas import CompanyReq, CreateSessionReq, SubmitCodeReq
from services.errors import (
    EmptyInterview,
    GatewayTransportFailure,
    InvalidAudioPayload,
    InvalidResume,
    NoActiveProblem,
    SessionNotFound,
    SessionStateConflict,
    UnsupportedInterviewKind,
)
from services.orchestrator import (
    AnswerResult,
    CodeSubmissionResult,
    CurrentProblemView,
    FinalizeResult,
    InterviewOrchestrator,
    InterviewStarted,
    ProblemSet,
    SessionCreated,
    TerminateResult,
)
from services.resume import extract_resume, resume_from_text


router = APIRouter(prefix="/api/interview-sessions")


def get_orchestrator(request: Request) -> InterviewOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="interview orchestrator not configured")
    return orchestrator


@contextmanager
def _errors() -> Iterator[None]:
    try:
        yield
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="session not found")
    except (EmptyInterview, InvalidAudioPayload, InvalidResume, NoActiveProblem, UnsupportedInterviewKind) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except SessionStateConflict as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except GatewayTransportFailure as exc:
        raise HTTPException(status_code=502, detail=f"language model unavailable: {exc}")


@router.post("", response_model=SessionCreated)
def create_session(req: CreateSessionReq, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> SessionCreated:
    with _errors():
        return orchestrator.create_session(
            kind=req.interview_kind,
            company=req.company.to_profile(),
            resume=resume_from_text(req.resume_text),
        )


@router.post("/upload-resume", response_model=SessionCreated)
def upload_resume(
    resume: UploadFile = File(...),
    interview_kind: str = Form(..., alias="interviewKind"),
    company_name: str = Form("Tech Company", alias="companyName"),
    organization_type: str = Form("startup", alias="organizationType"),
    role: str = Form("Software Development Engineer"),
    level: str = Form("Entry level"),
    industry: str = Form("technology"),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SessionCreated:
    company = CompanyReq(
        name=company_name,
        organization_type=organization_type,
        role=role,
        level=level,
        industry=industry,
    )
    with _errors():
        extracted = extract_resume(resume.file.read())
        return orchestrator.create_session(kind=interview_kind, company=company.to_profile(), resume=extracted)


@router.post("/{session_id}/start", response_model=InterviewStarted, response_model_exclude_none=True)
def start(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> InterviewStarted:
    with _errors():
        return orchestrator.start_interview(session_id)


@router.post("/{session_id}/answer", response_model=AnswerResult, response_model_exclude_none=True)
def answer(
    session_id: str,
    audio: UploadFile = File(...),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> AnswerResult:
    with _errors():
        return orchestrator.submit_answer(session_id, audio.file.read())


@router.post("/{session_id}/submit-code", response_model=CodeSubmissionResult)
def submit_code(
    session_id: str,
    req: SubmitCodeReq,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> CodeSubmissionResult:
    with _errors():
        return orchestrator.submit_code(session_id, req.code, req.language)


@router.post("/{session_id}/finalize", response_model=FinalizeResult)
def finalize(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> FinalizeResult:
    with _errors():
        return orchestrator.finalize(session_id)


@router.post("/{session_id}/terminate", response_model=TerminateResult)
def terminate(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> TerminateResult:
    return orchestrator.terminate(session_id)


@router.get("/{session_id}/dsa-problems", response_model=ProblemSet)
def dsa_problems(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> ProblemSet:
    with _errors():
        return orchestrator.get_problems(session_id)


@router.get("/{session_id}/current-problem", response_model=CurrentProblemView)
def current_problem(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> CurrentProblemView:
    with _errors():
        return orchestrator.get_current_problem(session_id)
