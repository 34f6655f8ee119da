"""Per-kind interview budget and the pure phase/time rules built on it."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from interview_session.models import InterviewKind, Phase
from services.errors import UnsupportedInterviewKind


class KindConfig(BaseModel):  # Fixed budget and phase sequence for one interview kind
    model_config = ConfigDict(frozen=True)

    kind: InterviewKind
    label: str
    max_minutes: int
    wrap_up_minutes: int
    phases: Tuple[Phase, ...]
    uses_coding_problems: bool = False
    introduces_coding_problem: bool = False

    @property
    def middle_phases(self) -> Tuple[Phase, ...]:
        return self.phases[1:-1]


KIND_CONFIG: Dict[str, KindConfig] = {
    "dsa": KindConfig(
        kind="dsa",
        label="DSA",
        max_minutes=50,
        wrap_up_minutes=45,
        phases=("introduction", "problem_solving", "wrap_up"),
        uses_coding_problems=True,
    ),
    "resume_cs": KindConfig(
        kind="resume_cs",
        label="Resume + CS Fundamentals",
        max_minutes=20,
        wrap_up_minutes=18,
        phases=("introduction", "resume_discussion", "technical_fundamentals", "wrap_up"),
        introduces_coding_problem=True,
    ),
    "technical_hr": KindConfig(
        kind="technical_hr",
        label="Technical + HR",
        max_minutes=20,
        wrap_up_minutes=18,
        phases=("introduction", "technical_assessment", "behavioral_assessment", "wrap_up"),
        introduces_coding_problem=True,
    ),
    "hr": KindConfig(
        kind="hr",
        label="HR",
        max_minutes=20,
        wrap_up_minutes=18,
        phases=("introduction", "behavioral_assessment", "cultural_fit", "wrap_up"),
    ),
}

KIND_ALIASES: Dict[str, str] = {
    "resume_cs_fundamentals": "resume_cs",
    "technical_behavioral": "technical_hr",
    "technical": "technical_hr",
    "behavioral": "hr",
}


def normalize_kind(raw: str) -> InterviewKind:
    """Resolve client spellings; unknown kinds are rejected, never defaulted."""

    key = (raw or "").strip().lower().replace("-", "_")
    key = KIND_ALIASES.get(key, key)
    if key not in KIND_CONFIG:
        raise UnsupportedInterviewKind(f"unsupported interview kind: {raw!r}")
    return KIND_CONFIG[key].kind


def kind_config(kind: str) -> KindConfig:
    return KIND_CONFIG[normalize_kind(kind)]


class TimeBudget(BaseModel):  # Elapsed/remaining view every prompt branch reads from
    model_config = ConfigDict(frozen=True)

    elapsed_minutes: int
    remaining_minutes: int
    max_minutes: int
    wrap_up_minutes: int

    @property
    def should_wrap_up(self) -> bool:
        return self.elapsed_minutes >= self.wrap_up_minutes


def elapsed_minutes(started_at: Optional[datetime], now: datetime) -> int:
    if started_at is None:
        return 0
    seconds = (now - started_at).total_seconds()
    return max(0, int(seconds // 60))


def time_budget(kind: str, started_at: Optional[datetime], now: datetime) -> TimeBudget:
    """Single source for the wrap-up decision."""

    config = kind_config(kind)
    elapsed = elapsed_minutes(started_at, now)
    return TimeBudget(
        elapsed_minutes=elapsed,
        remaining_minutes=max(0, config.max_minutes - elapsed),
        max_minutes=config.max_minutes,
        wrap_up_minutes=config.wrap_up_minutes,
    )


def plan_phase(kind: str, current: Phase, budget: TimeBudget, answered_rounds: int) -> Phase:
    """Next phase for a session; never moves backward.

    Wrap-up pre-empts everything once the threshold is reached. Otherwise the
    first answer leaves the introduction, and kinds with two middle phases
    switch to the second one at half the wrap-up threshold.
    """

    if current == "terminated":
        return current
    config = kind_config(kind)
    if budget.should_wrap_up or current == "wrap_up":
        return "wrap_up"
    middle = config.middle_phases
    target: Phase = "introduction"
    if answered_rounds >= 1 and middle:
        target = middle[0]
        if len(middle) > 1 and budget.elapsed_minutes * 2 >= config.wrap_up_minutes:
            target = middle[1]
    order = config.phases
    if current in order and order.index(current) > order.index(target):
        return current
    return target


__all__ = [
    "KIND_ALIASES",
    "KIND_CONFIG",
    "KindConfig",
    "TimeBudget",
    "elapsed_minutes",
    "kind_config",
    "normalize_kind",
    "plan_phase",
    "time_budget",
]
