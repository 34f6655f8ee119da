"""Parse-with-fallback for interviewer replies.

A reply is first decoded as a JSON object. When that fails, a few named
heuristics recover what they can from the raw text; anything still missing
takes its default. Nothing here raises on bad content.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional

from llm_gateway import parse_json_object

from .models import ParsedReply


DEFAULT_QUESTION = "Please provide your response to continue the interview."

QUESTION_KEYS = ("question", "NEXT_QUESTION", "next_question")
FEEDBACK_KEYS = ("feedback", "FEEDBACK")
MOVE_KEYS = ("shouldMoveToNextProblem", "should_move_to_next_problem")
CODING_KEYS = ("showDSAProblem", "showCodingProblem", "show_coding_problem")
WRAP_UP_KEYS = ("isWrapUp", "is_wrap_up")

THINKING_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"let me think about this",
        r"let me analyze",
        r"based on the context",
        r"considering the candidate",
        r"looking at their response",
        r"i would ask",
        r"my next question would be",
        r"the next question is",
        r"next question:",
        r"question:",
    )
)

_LABELLED_QUESTION = re.compile(r"question:\s*([\s\S]*?)(?=feedback:|$)", re.IGNORECASE)
_LABELLED_FEEDBACK = re.compile(r"feedback:\s*([\s\S]*?)$", re.IGNORECASE)
_QUOTED_QUESTION = re.compile(r'"(?:question|NEXT_QUESTION|next_question)"\s*:\s*"((?:[^"\\]|\\.)*)"')


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def clean_question_text(text: str) -> str:
    """Strip thinking preambles, collapse whitespace, drop wrapping quotes."""

    cleaned = text or ""
    for pattern in THINKING_PATTERNS:
        cleaned = pattern.sub("", cleaned, count=1)
    cleaned = collapse_whitespace(cleaned)
    cleaned = re.sub(r"^[\"']|[\"']$", "", cleaned)
    return cleaned.strip()


def question_from_json(data: Mapping[str, Any]) -> Optional[str]:
    for key in QUESTION_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def question_from_labels(raw: str) -> Optional[str]:
    """``question: ... feedback: ...`` plain-text replies."""

    lowered = raw.lower()
    if "question:" not in lowered or "feedback:" not in lowered:
        return None
    match = _LABELLED_QUESTION.search(raw)
    if not match or not match.group(1).strip():
        return None
    return match.group(1).strip()


def feedback_from_labels(raw: str) -> Optional[str]:
    lowered = raw.lower()
    if "question:" not in lowered:
        return None
    match = _LABELLED_FEEDBACK.search(raw)
    return match.group(1).strip() if match and match.group(1).strip() else None


def question_from_quoted_field(raw: str) -> Optional[str]:
    """Truncated or otherwise invalid JSON that still carries a quoted question."""

    match = _QUOTED_QUESTION.search(raw)
    if not match:
        return None
    text = match.group(1).replace('\\"', '"').replace("\\n", " ")
    return text.strip() or None


def flag_from_text(raw: str, keys: tuple[str, ...]) -> bool:
    """``"key": true`` anywhere in the text, for replies that fail to decode."""

    return any(re.search(rf'"{re.escape(key)}"\s*:\s*true\b', raw, re.IGNORECASE) for key in keys)


def coerce_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1"}
    if isinstance(value, (int, float)):
        return value != 0
    return False


def flag_from_json(data: Mapping[str, Any], keys: tuple[str, ...]) -> bool:
    return any(coerce_flag(data.get(key)) for key in keys)


def normalize_feedback(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return dict(value)
    if isinstance(value, str) and value.strip():
        return {"overallFeedback": value.strip()}
    return {}


def parse_reply(raw: str) -> ParsedReply:
    text = raw if isinstance(raw, str) else str(raw or "")
    data = parse_json_object(text)
    if data is not None:
        question = question_from_json(data)
        feedback: Any = next((data[key] for key in FEEDBACK_KEYS if key in data), None)
        # A structured question is shown as written; preamble cleanup is for free text only.
        return ParsedReply(
            question=collapse_whitespace(question or "") or DEFAULT_QUESTION,
            feedback=normalize_feedback(feedback),
            should_move_to_next_problem=flag_from_json(data, MOVE_KEYS),
            show_coding_problem=flag_from_json(data, CODING_KEYS),
            is_wrap_up=flag_from_json(data, WRAP_UP_KEYS),
            structured=question is not None,
        )

    question = question_from_labels(text) or question_from_quoted_field(text) or text
    return ParsedReply(
        question=clean_question_text(question) or DEFAULT_QUESTION,
        feedback=normalize_feedback(feedback_from_labels(text)),
        should_move_to_next_problem=flag_from_text(text, MOVE_KEYS),
        show_coding_problem=flag_from_text(text, CODING_KEYS),
        is_wrap_up=flag_from_text(text, WRAP_UP_KEYS),
        structured=False,
    )


__all__ = [
    "DEFAULT_QUESTION",
    "THINKING_PATTERNS",
    "clean_question_text",
    "coerce_flag",
    "collapse_whitespace",
    "feedback_from_labels",
    "flag_from_json",
    "flag_from_text",
    "normalize_feedback",
    "parse_reply",
    "question_from_json",
    "question_from_labels",
    "question_from_quoted_field",
]
