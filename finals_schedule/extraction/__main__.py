"""
Package CLI entrypoint for finals schedule tooling.

Usage:
  python -m finals_schedule.extraction parse <schedule.pdf|schedule.txt>
  python -m finals_schedule.extraction run <schedule.pdf|schedule.txt> --term "Fall 2025"
  python -m finals_schedule.extraction link-orphans --term "Fall 2025"
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from finals_schedule.clock import format_minutes_12h
from finals_schedule.db import make_engine, make_session_factory
from finals_schedule.extraction.materializer import find_or_create_term, find_term, link_orphan_exams, parse_term_name
from finals_schedule.extraction.pdf_text import extract_pdf_text
from finals_schedule.extraction.pipeline import parse_schedule_text, process_schedule_text
from finals_schedule.models import Base
from finals_schedule.schemas import ExamEntryOut, ParseOut


def _read_schedule_text(path: str, engine: Optional[str]) -> str:
    p = Path(path)
    if p.suffix.lower() == ".txt":
        return p.read_text(encoding="utf-8")
    return extract_pdf_text(p.read_bytes(), engine=engine)


def _cmd_parse(args: argparse.Namespace) -> int:
    text = _read_schedule_text(args.file, args.engine)
    result = parse_schedule_text(text, schedule_id=Path(args.file).name)

    out = ParseOut(
        format=result.format.value,
        detected=result.detected.value,
        format_ambiguous=result.ambiguous,
        line_count=result.line_count,
        entries=[
            ExamEntryOut(
                crn=e.crn,
                combined_crns=list(e.combined_crns),
                exam_date=e.exam_date,
                start_time=e.start_time,
                end_time=e.end_time,
                start=format_minutes_12h(e.start_time),
                end=format_minutes_12h(e.end_time),
                location=e.location,
            )
            for e in result.entries
        ],
    )
    print(out.model_dump_json(indent=2))
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    try:
        season, year = parse_term_name(args.term)
    except ValueError as e:
        print(f"[finals-cli] {e}")
        return 2

    text = _read_schedule_text(args.file, args.engine)

    engine = make_engine()
    if args.init_db:
        Base.metadata.create_all(engine)
    factory = make_session_factory(engine)

    with factory() as session:
        term = find_or_create_term(session, season, year)
        summary = process_schedule_text(session, text, term, schedule_id=Path(args.file).name)
        session.commit()

    print(json.dumps(summary.model_dump(), indent=2))
    return 0


def _cmd_link_orphans(args: argparse.Namespace) -> int:
    try:
        season, year = parse_term_name(args.term)
    except ValueError as e:
        print(f"[finals-cli] {e}")
        return 2

    factory = make_session_factory(make_engine())
    with factory() as session:
        term = find_term(session, season, year)
        if term is None:
            print(f"[finals-cli] Unknown term: {args.term}")
            return 2
        linked = link_orphan_exams(session, term)
        session.commit()

    print(f"[finals-cli] linked {linked} orphan exam(s) for {args.term}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m finals_schedule.extraction")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_parse = sub.add_parser("parse", help="Parse a schedule and print the exam entries as JSON")
    p_parse.add_argument("file", help="Schedule PDF, or already-extracted .txt")
    p_parse.add_argument("--engine", choices=["pdftotext", "pdfplumber"], default=None)

    p_run = sub.add_parser("run", help="Parse a schedule and persist exams for a term")
    p_run.add_argument("file", help="Schedule PDF, or already-extracted .txt")
    p_run.add_argument("--term", required=True, help='Academic term, e.g. "Fall 2025"')
    p_run.add_argument("--engine", choices=["pdftotext", "pdfplumber"], default=None)
    p_run.add_argument("--init-db", action="store_true", help="Create missing tables first")

    p_link = sub.add_parser("link-orphans", help="Link orphan exams to courses imported since")
    p_link.add_argument("--term", required=True, help='Academic term, e.g. "Fall 2025"')

    args = parser.parse_args(argv)

    if args.cmd == "parse":
        return _cmd_parse(args)
    if args.cmd == "run":
        return _cmd_run(args)
    if args.cmd == "link-orphans":
        return _cmd_link_orphans(args)

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
