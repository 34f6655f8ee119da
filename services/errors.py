from __future__ import annotations  # Error taxonomy surfaced by the interview orchestrator


class InterviewError(RuntimeError):  # Base for every orchestrator-level failure
    pass


class SessionNotFound(InterviewError, KeyError):  # Referenced id is absent from the session store
    def __init__(self, session_id: str) -> None:
        super().__init__(f"session not found: {session_id}")
        self.session_id = session_id

    def __str__(self) -> str:
        return f"session not found: {self.session_id}"


class EmptyInterview(InterviewError):  # finalize requested before any question was asked
    pass


class InvalidAudioPayload(InterviewError, ValueError):  # Empty or oversize audio rejected up front
    pass


class InvalidResume(InterviewError, ValueError):  # Resume upload could not be turned into text
    pass


class UnsupportedInterviewKind(InterviewError, ValueError):  # Kind outside the known table
    pass


class NoActiveProblem(InterviewError):  # Coding operation on a session with no problem on screen
    pass


class SessionStateConflict(InterviewError):  # Operation out of order for the session lifecycle (start twice, advance before start)
    pass


class GatewayTransportFailure(InterviewError):  # Language model call failed; session left untouched
    pass


__all__ = [
    "EmptyInterview",
    "GatewayTransportFailure",
    "InterviewError",
    "InvalidAudioPayload",
    "InvalidResume",
    "NoActiveProblem",
    "SessionNotFound",
    "SessionStateConflict",
    "UnsupportedInterviewKind",
]
