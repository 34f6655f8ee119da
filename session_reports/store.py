from __future__ import annotations  # Session report persistence layer

import sqlite3
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter

from interview_session.models import CodeEvaluation, ToneVector

from .models import SessionExchange, SessionReport


_EVALUATIONS = TypeAdapter(List[CodeEvaluation])


class SessionReportStore:  # SQLite-backed hand-off for finalized interviews
    def __init__(self, path: Path | str) -> None:  # Initialize store with database path
        self._path = Path(path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:  # Open SQLite connection with schema settings
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _ensure_schema(self) -> None:  # Create persistence tables if missing
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS session_reports (
                    session_id TEXT PRIMARY KEY,
                    interview_kind TEXT NOT NULL,
                    candidate_name TEXT NOT NULL,
                    company_name TEXT NOT NULL,
                    role TEXT NOT NULL,
                    summary_text TEXT NOT NULL,
                    total_rounds INTEGER NOT NULL,
                    question_count INTEGER NOT NULL,
                    response_count INTEGER NOT NULL,
                    tone_sample_count INTEGER NOT NULL,
                    average_tone_json TEXT,
                    evaluations_json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS session_exchanges (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id TEXT NOT NULL,
                    round INTEGER NOT NULL,
                    question TEXT NOT NULL,
                    answer TEXT NOT NULL,
                    problem_title TEXT,
                    FOREIGN KEY(session_id) REFERENCES session_reports(session_id) ON DELETE CASCADE
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def save(self, report: SessionReport) -> None:  # Insert or replace a report and its transcript
        conn = self._connect()
        try:
            conn.execute("DELETE FROM session_reports WHERE session_id = ?", (report.session_id,))
            conn.execute(
                """
                INSERT INTO session_reports (
                    session_id,
                    interview_kind,
                    candidate_name,
                    company_name,
                    role,
                    summary_text,
                    total_rounds,
                    question_count,
                    response_count,
                    tone_sample_count,
                    average_tone_json,
                    evaluations_json,
                    created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    report.session_id,
                    report.interview_kind,
                    report.candidate_name,
                    report.company_name,
                    report.role,
                    report.summary_text,
                    report.total_rounds,
                    report.question_count,
                    report.response_count,
                    report.tone_sample_count,
                    report.average_tone.model_dump_json() if report.average_tone else None,
                    _EVALUATIONS.dump_json(report.evaluations).decode("utf-8"),
                    report.created_at,
                ),
            )
            conn.executemany(
                """
                INSERT INTO session_exchanges (session_id, round, question, answer, problem_title)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (report.session_id, item.round, item.question, item.answer, item.problem_title)
                    for item in report.exchanges
                ],
            )
            conn.commit()
        finally:
            conn.close()

    def load(self, session_id: str) -> Optional[SessionReport]:  # Load full report with transcript, None when absent
        conn = self._connect()
        try:
            header = conn.execute(
                "SELECT * FROM session_reports WHERE session_id = ?",
                (session_id,),
            ).fetchone()
            if header is None:
                return None
            rows = conn.execute(
                """
                SELECT round, question, answer, problem_title
                FROM session_exchanges
                WHERE session_id = ?
                ORDER BY round ASC
                """,
                (session_id,),
            ).fetchall()
        finally:
            conn.close()
        exchanges = [
            SessionExchange(
                round=row["round"],
                question=row["question"],
                answer=row["answer"],
                problem_title=row["problem_title"],
            )
            for row in rows
        ]
        tone_json = header["average_tone_json"]
        return SessionReport(
            session_id=header["session_id"],
            interview_kind=header["interview_kind"],
            candidate_name=header["candidate_name"],
            company_name=header["company_name"],
            role=header["role"],
            summary_text=header["summary_text"],
            total_rounds=header["total_rounds"],
            question_count=header["question_count"],
            response_count=header["response_count"],
            tone_sample_count=header["tone_sample_count"],
            average_tone=ToneVector.model_validate_json(tone_json) if tone_json else None,
            exchanges=exchanges,
            evaluations=_EVALUATIONS.validate_json(header["evaluations_json"]),
            created_at=header["created_at"],
        )

    def recent(self, limit: int = 20) -> List[dict]:  # Newest report headers first
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT session_id, interview_kind, candidate_name, company_name, question_count, created_at
                FROM session_reports
                ORDER BY created_at DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        finally:
            conn.close()
        return [dict(row) for row in rows]


__all__ = ["SessionReportStore"]
