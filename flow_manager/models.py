from __future__ import annotations  # Evidence and outcome models exchanged with the flow machine

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from interview_session.models import CodeEvaluation, DSAProblem, Phase, ToneVector


class AnswerEvidence(BaseModel):  # Transcript plus tone for one spoken answer
    model_config = ConfigDict(frozen=True)

    transcript: str
    tone: ToneVector


class CodeEvidence(BaseModel):  # Scored code submission for the active problem
    model_config = ConfigDict(frozen=True)

    evaluation: CodeEvaluation
    code: str = ""
    language: str = "javascript"


Evidence = Union[AnswerEvidence, CodeEvidence]


class ParsedReply(BaseModel):  # Directives recovered from one model reply; absent fields default
    question: str
    feedback: Dict[str, Any] = Field(default_factory=dict)
    should_move_to_next_problem: bool = False
    show_coding_problem: bool = False
    is_wrap_up: bool = False
    structured: bool = True


class StartOutcome(BaseModel):  # Result of opening an interview
    question: str
    round: int
    phase: Phase
    max_duration_minutes: int
    wrap_up_threshold_minutes: int
    dsa_problems: List[DSAProblem] = Field(default_factory=list)
    total_problems: int = 0


class AdvanceOutcome(BaseModel):  # Result of one advance step
    question: str
    round: int
    phase: Phase
    phase_changed: bool = False
    is_wrap_up: bool = False
    should_move_to_next_problem: bool = False
    problem_advanced: bool = False
    show_coding_problem: bool = False
    feedback: Dict[str, Any] = Field(default_factory=dict)
    elapsed_minutes: int = 0
    remaining_minutes: int = 0
    current_problem: Optional[DSAProblem] = None
    current_problem_index: Optional[int] = None
    total_problems: Optional[int] = None


__all__ = [
    "AdvanceOutcome",
    "AnswerEvidence",
    "CodeEvidence",
    "Evidence",
    "ParsedReply",
    "StartOutcome",
]
