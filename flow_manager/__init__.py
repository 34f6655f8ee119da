from __future__ import annotations  # Interview flow state machine package

from .machine import SUMMARY_UNAVAILABLE, InterviewFlowMachine, code_submission_note, describe_evidence
from .models import AdvanceOutcome, AnswerEvidence, CodeEvidence, Evidence, ParsedReply, StartOutcome
from .policy import (
    KIND_ALIASES,
    KIND_CONFIG,
    KindConfig,
    TimeBudget,
    elapsed_minutes,
    kind_config,
    normalize_kind,
    plan_phase,
    time_budget,
)
from .reply import DEFAULT_QUESTION, parse_reply

__all__ = [
    "AdvanceOutcome",
    "AnswerEvidence",
    "CodeEvidence",
    "DEFAULT_QUESTION",
    "Evidence",
    "InterviewFlowMachine",
    "KIND_ALIASES",
    "KIND_CONFIG",
    "KindConfig",
    "ParsedReply",
    "SUMMARY_UNAVAILABLE",
    "StartOutcome",
    "TimeBudget",
    "code_submission_note",
    "describe_evidence",
    "elapsed_minutes",
    "kind_config",
    "normalize_kind",
    "plan_phase",
    "time_budget",
]
