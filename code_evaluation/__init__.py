from __future__ import annotations  # Code evaluation package exports

from .evaluation import (
    ADVANCE_THRESHOLD,
    CodeEvaluationEngine,
    MIDPOINT_SCORE,
    NextAction,
    RUBRIC_WEIGHTS,
    UNPARSED_FEEDBACK,
    build_evaluation_messages,
    clamp_score,
    next_action,
    parse_evaluation,
    recover_complexity,
    recover_score,
)

__all__ = [
    "ADVANCE_THRESHOLD",
    "CodeEvaluationEngine",
    "MIDPOINT_SCORE",
    "NextAction",
    "RUBRIC_WEIGHTS",
    "UNPARSED_FEEDBACK",
    "build_evaluation_messages",
    "clamp_score",
    "next_action",
    "parse_evaluation",
    "recover_complexity",
    "recover_score",
]
