"""Prompt templates for each interview step, rendered with langchain-core."""
from __future__ import annotations

from textwrap import dedent
from typing import Optional, Tuple

from langchain_core.prompts import ChatPromptTemplate

from interview_session.models import InterviewSession, ToneVector

from .policy import KindConfig, TimeBudget, kind_config


RESPONSE_FORMAT = dedent(
    """
    Response Format (JSON only):
    {
      "question": "<your next question, shown directly to the candidate>",
      "feedback": {
        "score": <0-50>,
        "overallFeedback": "<internal evaluation of the previous answer>",
        "strengths": ["<strength>"],
        "weaknesses": ["<weakness>"]
      },
      "shouldMoveToNextProblem": false,
      "showCodingProblem": false,
      "isWrapUp": false,
      "currentStage": "<stage name>"
    }
    """
).strip()

INTERVIEWER_GUIDANCE = dedent(
    """
    You are an expert interviewer from {company} ({organization_type}, {industry}) conducting a
    realistic {kind_label} interview for the {role} position ({level}).
    Reply with ONLY a JSON object. The "question" field is displayed directly to the candidate:
    keep it direct, professional and complete, with no thinking text and no explanations.
    The "feedback" field is internal only; be honest and include negative points.
    Never reveal answers to the problems you ask.
    """
).strip()

DSA_STAGES = dedent(
    """
    Interview Stages:
    1. Problem Intro - initial thoughts
    2. Approach Discussion - how would you approach this?
    3. Approach Refinement - optimization if needed
    4. Complexity Analysis - time and space complexity
    5. Edge Cases - what should we consider?
    6. Implementation - can you implement this?
    7. Code Evaluation - follow-up questions on the submitted code
    8. Completion - move to the next problem when satisfied
    Only set "shouldMoveToNextProblem" to true once approach, complexity and edge cases
    have been discussed substantively, or the candidate has clearly demonstrated understanding.
    """
).strip()


_WELCOME_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", INTERVIEWER_GUIDANCE),
        (
            "human",
            (
                "INTERVIEW WELCOME\n\n"
                "You are starting a {kind_label} interview at {company} for the {role} position.\n\n"
                "Your Task:\n"
                "1. Welcome the candidate warmly: \"Hi {candidate}, I'm your interviewer from {company}. "
                "Thanks for joining us today.\"\n"
                "2. Ask for a brief introduction: background and what interests them about this role.\n"
                "{framing}\n\n"
                "Keep the introduction concise.\n\n"
                "{response_format}"
            ),
        ),
    ]
)

_CONTINUATION_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", INTERVIEWER_GUIDANCE),
        (
            "human",
            (
                "{kind_label} INTERVIEW - NEXT QUESTION\n\n"
                "Context: {company} | {role} | {elapsed}/{max_minutes} min elapsed, {remaining} min remaining | {candidate}\n"
                "Current Phase: {phase}\n"
                "Round: {round}\n\n"
                "Conversation History:\n{history}\n\n"
                "Most Recent Question: \"{last_question}\"\n"
                "Candidate's Latest Response: \"{evidence}\"\n"
                "Tone Analysis: {tone}\n\n"
                "{guidance}\n\n"
                "Your Task: ask ONE focused question that moves the interview forward.\n\n"
                "{response_format}"
            ),
        ),
    ]
)

_WRAP_UP_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", INTERVIEWER_GUIDANCE),
        (
            "human",
            (
                "INTERVIEW WRAP-UP\n\n"
                "Context: {company} | {role} | {candidate} | {elapsed}/{max_minutes} min elapsed\n\n"
                "Conversation History:\n{history}\n\n"
                "Your Task:\n"
                "1. Thank the candidate for their time.\n"
                "2. Ask if they have any questions about the role or the company.\n"
                "3. Provide next steps.\n"
                "4. End professionally.\n\n"
                "Response Format (JSON only):\n"
                '{{"question": "<your wrap-up message>", '
                '"feedback": {{"score": 0, "overallFeedback": "Interview completed", "strengths": [], "weaknesses": []}}, '
                '"shouldMoveToNextProblem": false, "isWrapUp": true}}'
            ),
        ),
    ]
)

_SUMMARY_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are an expert HR professional and technical interviewer. Provide comprehensive, "
            "professional interview feedback and a summary with clear sections and actionable advice.",
        ),
        (
            "human",
            (
                "Here is the complete interview session data. Provide an analysis within 300-400 words.\n\n"
                "Target Company: {company} ({organization_type})\n"
                "Role: {role} ({level})\n"
                "Interview Kind: {kind_label}\n"
                "Candidate: {candidate}\n"
                "Total Questions Asked: {question_count}\n\n"
                "Cover:\n"
                "1. Experience level assessment (20%)\n"
                "2. Company-specific assessment and cultural fit (25%)\n"
                "3. Technical assessment: strengths, gaps, problem-solving approach (30%)\n"
                "4. Communication skills: clarity, confidence, structure (15%)\n"
                "5. Overall evaluation with confidence, technical, communication and cultural-fit scores (1-10) "
                "and a recommendation (10%)\n"
                "6. Specific recommendations\n\n"
                "Session Data:\n{rounds}\n\n"
                "{evaluations}"
            ),
        ),
    ]
)


def _company_vars(session: InterviewSession, config: KindConfig) -> dict[str, str]:
    company = session.company
    return {
        "company": company.name,
        "organization_type": company.organization_type,
        "industry": company.industry,
        "role": company.role,
        "level": company.level,
        "kind_label": config.label,
        "candidate": session.candidate.display_name,
    }


def _split(messages) -> Tuple[str, str]:
    system, human = messages
    return str(system.content), str(human.content)


def format_tone(tone: Optional[ToneVector]) -> str:
    return tone.describe() if tone is not None else "No tone analysis available"


def conversation_history(session: InterviewSession) -> str:
    """Round-by-round Q/A transcript."""

    if not session.question_history:
        return "No previous conversation."
    blocks = []
    for index, record in enumerate(session.question_history):
        answer = session.responses[index] if index < len(session.responses) else "No response"
        label = f" ({record.problem_title})" if record.problem_title else ""
        blocks.append(f"Round {record.round}{label}:\nQ: {record.text}\nA: {answer}")
    return "\n\n".join(blocks)


def welcome_framing(session: InterviewSession, problem_count: int) -> str:
    if session.kind == "dsa":
        return (
            f"DSA INTERVIEW: mention that you will work through {problem_count} coding problems together, "
            "each displayed on screen with a code editor."
        )
    if session.kind == "hr":
        return "HR INTERVIEW: set expectations for a conversation about experiences, motivation and work style."
    return "Set expectations: a discussion of their background followed by technical questions."


def kind_guidance(session: InterviewSession, coding_after_rounds: int) -> str:
    """Kind-specific instructions embedded in continuation prompts."""

    if session.kind == "dsa":
        problem = session.current_problem
        if problem is None:
            return "INTRODUCTION: set expectations for the coding problems."
        position = f"{session.current_problem_index + 1}/{len(session.dsa_problems)}"
        return (
            f"Current Problem ({position}): {problem.title} [{problem.difficulty}]\n"
            f"{problem.description}\n\n"
            f"{DSA_STAGES}"
        )
    resume_excerpt = session.candidate.resume_text[:200]
    if session.kind == "resume_cs":
        return (
            "RESUME + CS FUNDAMENTALS INTERVIEW\n"
            "- Focus on projects and technologies from the resume.\n"
            "- Ask about CS fundamentals (DBMS, OS, Networks, OOP) tied to those projects.\n"
            f"- After {coding_after_rounds} rounds, introduce a coding problem by setting \"showCodingProblem\" to true.\n"
            f"Resume: {resume_excerpt}..."
        )
    if session.kind == "technical_hr":
        return (
            "TECHNICAL + HR INTERVIEW\n"
            "- Mix technical and behavioral questions.\n"
            "- Ask about background, projects, teamwork and goals.\n"
            f"- After {coding_after_rounds} rounds, introduce a coding problem by setting \"showCodingProblem\" to true.\n"
            f"Resume: {resume_excerpt}..."
        )
    return (
        "HR INTERVIEW\n"
        "- Behavioral questions and cultural fit only, no coding.\n"
        "- Frame questions with the STAR method (Situation, Task, Action, Result).\n"
        "- Explore career goals, motivation and work style."
    )


def welcome_prompt(session: InterviewSession, *, problem_count: int) -> Tuple[str, str]:
    config = kind_config(session.kind)
    return _split(
        _WELCOME_PROMPT.format_messages(
            **_company_vars(session, config),
            framing=welcome_framing(session, problem_count),
            response_format=RESPONSE_FORMAT,
        )
    )


def continuation_prompt(
    session: InterviewSession,
    *,
    evidence: str,
    tone: Optional[ToneVector],
    budget: TimeBudget,
    phase: str,
    coding_after_rounds: int,
) -> Tuple[str, str]:
    config = kind_config(session.kind)
    last = session.last_question
    return _split(
        _CONTINUATION_PROMPT.format_messages(
            **_company_vars(session, config),
            elapsed=budget.elapsed_minutes,
            max_minutes=budget.max_minutes,
            remaining=budget.remaining_minutes,
            phase=phase,
            round=session.round,
            history=conversation_history(session),
            last_question=last.text if last else "",
            evidence=evidence or "No response yet",
            tone=format_tone(tone),
            guidance=kind_guidance(session, coding_after_rounds),
            response_format=RESPONSE_FORMAT,
        )
    )


def wrap_up_prompt(session: InterviewSession, *, budget: TimeBudget) -> Tuple[str, str]:
    config = kind_config(session.kind)
    return _split(
        _WRAP_UP_PROMPT.format_messages(
            **_company_vars(session, config),
            elapsed=budget.elapsed_minutes,
            max_minutes=budget.max_minutes,
            history=conversation_history(session),
        )
    )


def summary_prompt(session: InterviewSession) -> Tuple[str, str]:
    config = kind_config(session.kind)
    rounds = []
    for index, record in enumerate(session.question_history):
        lines = [f"=== Round {record.round} ===", f"Question: {record.text}"]
        if index < len(session.responses):
            lines.append(f"Answer: {session.responses[index]}")
        rounds.append("\n".join(lines))
    # One tone sample per spoken answer; code submissions carry none.
    tones = "\n".join(
        f"- Answer {index}: {format_tone(tone)}" for index, tone in enumerate(session.tone_history, start=1)
    )
    if tones:
        rounds.append(f"Tone Samples:\n{tones}")
    evaluations = "\n".join(
        f"- {item.problem_title} ({item.language}): {item.score:g}/50, time {item.time_complexity}, "
        f"space {item.space_complexity}. {item.overall_feedback}"
        for item in session.evaluations
    )
    return _split(
        _SUMMARY_PROMPT.format_messages(
            **_company_vars(session, config),
            question_count=len(session.question_history),
            rounds="\n\n".join(rounds),
            evaluations=f"Code Evaluations:\n{evaluations}" if evaluations else "",
        )
    )


__all__ = [
    "DSA_STAGES",
    "INTERVIEWER_GUIDANCE",
    "RESPONSE_FORMAT",
    "continuation_prompt",
    "conversation_history",
    "format_tone",
    "kind_guidance",
    "summary_prompt",
    "welcome_framing",
    "welcome_prompt",
    "wrap_up_prompt",
]
