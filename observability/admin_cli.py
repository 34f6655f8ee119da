"""Lightweight CLI helpers for inspecting finalized interview reports."""
from __future__ import annotations

import argparse

from config.settings import settings
from session_reports import SessionReportStore


def tail_reports(limit: int = 20) -> None:
    store = SessionReportStore(settings.DB_PATH)
    for row in store.recent(limit):
        print(
            f"[{row['created_at']}] {row['session_id']} {row['interview_kind']} "
            f"candidate={row['candidate_name']} company={row['company_name']} questions={row['question_count']}"
        )


def show_report(session_id: str) -> None:
    store = SessionReportStore(settings.DB_PATH)
    report = store.load(session_id)
    if report is None:
        print(f"no report for session {session_id}")
        return
    print(f"{report.candidate_name} @ {report.company_name} ({report.interview_kind}, {report.total_rounds} rounds)")
    for exchange in report.exchanges:
        print(f"  Round {exchange.round}: Q: {exchange.question}")
        print(f"           A: {exchange.answer}")
    for evaluation in report.evaluations:
        print(f"  Code [{evaluation.problem_title}] {evaluation.score:g}/50")
    print()
    print(report.summary_text)


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-reports", type=int, help="Show the latest finalized session reports")
    parser.add_argument("--show", metavar="SESSION_ID", help="Print one report with its transcript")
    args = parser.parse_args()

    if args.tail_reports:
        tail_reports(args.tail_reports)
    if args.show:
        show_report(args.show)


if __name__ == "__main__":
    main()
