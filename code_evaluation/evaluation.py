"""Rubric-weighted scoring of submitted solutions."""
from __future__ import annotations

import logging
import re
from datetime import datetime
from textwrap import dedent
from typing import Any, Callable, Dict, List, Literal, Optional

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel

from interview_session.models import CodeEvaluation, DSAProblem
from llm_gateway import LanguageModel, parse_json_object


logger = logging.getLogger(__name__)

MAX_SCORE = 50.0
MIDPOINT_SCORE = 25.0
ADVANCE_THRESHOLD = 35.0
FOLLOW_UP_FLOOR = 20.0

UNPARSED_FEEDBACK = "Detailed feedback unavailable: the evaluation reply could not be parsed."

RUBRIC_WEIGHTS = (
    ("Correctness", 40, "Does the code solve the problem for the samples and hidden cases?"),
    ("Efficiency", 25, "Are the time and space complexity optimal for this problem?"),
    ("Code Quality", 20, "Is the code readable, well-structured and maintainable?"),
    ("Edge Cases", 10, "Are boundary conditions and degenerate inputs handled?"),
    ("Best Practices", 5, "Does it follow idioms of the chosen language?"),
)

EVALUATION_GUIDANCE = dedent(
    """
    You are an expert programming interviewer grading a candidate's solution to a DSA problem.
    Score strictly on a 0-50 scale using the weighted rubric you are given.
    Reply with ONLY a JSON object, no markdown fences and no commentary.
    """
).strip()

_SCORE_PATTERN = re.compile(r"score[:\s]*(\d+(?:\.\d+)?)", re.IGNORECASE)
_TIME_PATTERN = re.compile(r"time.*?complexity[:\s]*(O\([^)]+\))", re.IGNORECASE)
_SPACE_PATTERN = re.compile(r"space.*?complexity[:\s]*(O\([^)]+\))", re.IGNORECASE)


_EVALUATION_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", "{instructions}"),
        (
            "human",
            (
                "PROBLEM DETAILS:\n"
                "Title: {title}\n"
                "Difficulty: {difficulty}\n"
                "Topics: {topics}\n"
                "Description: {description}\n\n"
                "CANDIDATE'S CODE ({language_label}):\n"
                "```{language}\n{code}\n```\n\n"
                "RUBRIC (total 50 points):\n{rubric}\n\n"
                "Respond with JSON:\n"
                '{{"score": <0-50>, "overallFeedback": "<two or three sentences>", '
                '"strengths": ["..."], "weaknesses": ["..."], '
                '"timeComplexity": "<O(...)>", "spaceComplexity": "<O(...)>"}}'
            ),
        ),
    ]
)


class NextAction(BaseModel):  # Threshold decision derived from a score
    action: Literal["advanceToNextProblem", "requestFollowUp"]
    rationale: str


def next_action(score: float) -> NextAction:
    """Map a 0-50 score to the follow-up policy; 35 and above advances."""

    if score >= ADVANCE_THRESHOLD:
        return NextAction(
            action="advanceToNextProblem",
            rationale="Solution is strong; move on to the next problem.",
        )
    if score >= FOLLOW_UP_FLOOR:
        return NextAction(
            action="requestFollowUp",
            rationale="Solution is partially correct; probe optimizations and edge cases.",
        )
    return NextAction(
        action="requestFollowUp",
        rationale="Solution needs significant work; guide the candidate through the approach.",
    )


def rubric_lines() -> str:
    return "\n".join(
        f"{index}. {name} ({weight}% = {MAX_SCORE * weight / 100:g} pts): {question}"
        for index, (name, weight, question) in enumerate(RUBRIC_WEIGHTS, start=1)
    )


def build_evaluation_messages(code: str, problem: DSAProblem, language: str) -> tuple[str, str]:
    """Render the rubric prompt as (system, user) text."""

    messages = _EVALUATION_PROMPT.format_messages(
        instructions=EVALUATION_GUIDANCE,
        title=problem.title,
        difficulty=problem.difficulty,
        topics=", ".join(problem.topics) or "General",
        description=problem.description,
        language=language,
        language_label=language.upper(),
        code=code,
        rubric=rubric_lines(),
    )
    system, human = messages
    return str(system.content), str(human.content)


def clamp_score(value: float) -> float:
    return max(0.0, min(MAX_SCORE, value))


def recover_score(raw: str) -> Optional[float]:
    match = _SCORE_PATTERN.search(raw)
    if not match:
        return None
    return float(match.group(1))


def recover_complexity(raw: str, *, space: bool = False) -> str:
    match = (_SPACE_PATTERN if space else _TIME_PATTERN).search(raw)
    return match.group(1) if match else "Unknown"


def _coerce_score(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


def parse_evaluation(
    raw: str,
    *,
    problem_title: str,
    language: str,
    created_at: Optional[datetime] = None,
) -> CodeEvaluation:
    """Parse-with-fallback: JSON, then a regex score, then the midpoint."""

    stamp = created_at or datetime.utcnow()
    data = parse_json_object(raw)
    if data is not None:
        score = _coerce_score(data.get("score"))
        if score is None:
            score = recover_score(raw)
        if score is not None:
            feedback = data.get("overallFeedback") or data.get("feedback") or ""
            return CodeEvaluation(
                score=clamp_score(score),
                overall_feedback=str(feedback).strip() or UNPARSED_FEEDBACK,
                strengths=_string_list(data.get("strengths")),
                weaknesses=_string_list(data.get("weaknesses") or data.get("suggestions")),
                problem_title=problem_title,
                language=language,
                time_complexity=str(data.get("timeComplexity") or recover_complexity(raw)),
                space_complexity=str(data.get("spaceComplexity") or recover_complexity(raw, space=True)),
                created_at=stamp,
            )

    score = recover_score(raw)
    if score is not None:
        logger.warning("Code evaluation reply was not JSON; recovered score %.1f from text", score)
        excerpt = raw.strip()
        if len(excerpt) > 200:
            excerpt = excerpt[:200] + "..."
        return CodeEvaluation(
            score=clamp_score(score),
            overall_feedback=excerpt or UNPARSED_FEEDBACK,
            problem_title=problem_title,
            language=language,
            time_complexity=recover_complexity(raw),
            space_complexity=recover_complexity(raw, space=True),
            created_at=stamp,
        )

    logger.warning("Code evaluation reply unparseable; defaulting to midpoint score")
    return CodeEvaluation(
        score=MIDPOINT_SCORE,
        overall_feedback=UNPARSED_FEEDBACK,
        problem_title=problem_title,
        language=language,
        created_at=stamp,
    )


class CodeEvaluationEngine:
    """Scores code through the language model.

    Only a transport failure of the model propagates; every content problem
    is absorbed by :func:`parse_evaluation`.
    """

    def __init__(self, model: LanguageModel, *, now: Callable[[], datetime] = datetime.utcnow) -> None:
        self._model = model
        self._now = now

    def evaluate(self, code: str, problem: DSAProblem, language: str = "javascript") -> CodeEvaluation:
        system, prompt = build_evaluation_messages(code, problem, language)
        raw = self._model.ask(prompt, system_prompt=system)
        evaluation = parse_evaluation(raw, problem_title=problem.title, language=language, created_at=self._now())
        logger.info("Scored submission for %s: %.1f/50", problem.title, evaluation.score)
        return evaluation


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
