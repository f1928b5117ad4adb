# orchestrates: text -> normalize -> detect -> parse -> materialize -> summary

# finals_schedule/extraction/pipeline.py
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from ..models import FinalsSchedule, Term
from ..schemas import ProcessSummary
from ..workflow_logger import captured_lines, log_event, log_line
from .block_parser import parse_block_layout
from .detector import detect_format
from .materializer import materialize_entries
from .normalizer import normalize_text, split_lines
from .pdf_text import extract_pdf_text
from .records import ExamEntry, ParseResult, ScheduleFormat
from .row_parser import parse_row_layout

PARSERS: Dict[ScheduleFormat, Callable[[str], List[ExamEntry]]] = {
    ScheduleFormat.BLOCK_ZIPPER: parse_block_layout,
    ScheduleFormat.STATE_MACHINE: parse_row_layout,
}

# tie-break order when detection fails and both parsers find the same number of entries
FALLBACK_ORDER = (ScheduleFormat.BLOCK_ZIPPER, ScheduleFormat.STATE_MACHINE)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


# ----------------------------
# Parsing
# ----------------------------
def parse_schedule_text(text: str, schedule_id: str = "-") -> ParseResult:
    """
    Normalize, detect the layout and parse. Unknown layouts run every parser
    and keep the largest result; a tie keeps the first in FALLBACK_ORDER and
    is flagged ambiguous.
    """
    normalized = normalize_text(text)
    line_count = len(split_lines(normalized))
    detected = detect_format(normalized)

    if detected != ScheduleFormat.UNKNOWN:
        entries = PARSERS[detected](normalized)
        result = ParseResult(format=detected, entries=entries, detected=detected, line_count=line_count)
    else:
        # both parsers decode the same lines; only the kept parser's diagnostics are printed
        counts: Dict[ScheduleFormat, List[ExamEntry]] = {}
        diagnostics: Dict[ScheduleFormat, List[str]] = {}
        for fmt in FALLBACK_ORDER:
            with captured_lines() as lines:
                counts[fmt] = PARSERS[fmt](normalized)
            diagnostics[fmt] = lines

        best = max(FALLBACK_ORDER, key=lambda fmt: len(counts[fmt]))
        for message in diagnostics[best]:
            log_line(message)
        tied = [fmt for fmt in FALLBACK_ORDER if len(counts[fmt]) == len(counts[best])]
        result = ParseResult(
            format=best,
            entries=counts[best],
            detected=detected,
            ambiguous=len(tied) > 1,
            line_count=line_count,
        )
        log_event(
            schedule_id=schedule_id,
            status="parsing",
            actor="detector",
            event="unknown_format_fallback",
            extra={
                "chosen": best.value,
                "ambiguous": result.ambiguous,
                "counts": {fmt.value: len(v) for fmt, v in counts.items()},
            },
        )

    if not result.entries and line_count:
        log_event(
            schedule_id=schedule_id,
            status="needs_review",
            actor="parser",
            event="no_entries_parsed",
            extra={"detected": detected.value, "line_count": line_count},
        )

    return result


# ----------------------------
# Parse + persist
# ----------------------------
def process_schedule_text(session: Session, text: str, term: Term, schedule_id: str = "-") -> ProcessSummary:
    """
    Parse extracted schedule text and upsert FinalExam rows for the term.
    Per-entry failures end up in summary.errors. The caller commits.
    """
    if term is None:
        raise ValueError("Term is required")

    parsed = parse_schedule_text(text, schedule_id=schedule_id)
    log_event(
        schedule_id=schedule_id,
        status="parsing",
        actor="parser",
        event="parsed",
        extra={"format": parsed.format.value, "entries": len(parsed.entries), "term": term.display_name},
    )

    results = materialize_entries(session, parsed.entries, term)
    summary = ProcessSummary(
        total=len(parsed.entries),
        created=results.created,
        updated=results.updated,
        linked=results.linked,
        orphan=results.orphan,
        rooms_created=results.rooms_created,
        errors=results.errors,
        format=parsed.format.value,
        format_ambiguous=parsed.ambiguous,
    )
    log_event(
        schedule_id=schedule_id,
        status="materialized",
        actor="materializer",
        event="summary",
        extra=summary.model_dump(),
    )
    return summary


def process_finals_schedule(
    session: Session,
    pdf_bytes: bytes,
    term: Term,
    engine: Optional[str] = None,
    schedule_id: str = "-",
) -> ProcessSummary:
    """PDF bytes -> summary. TextExtractionError propagates with nothing persisted."""
    if term is None:
        raise ValueError("Term is required")
    text = extract_pdf_text(pdf_bytes, engine=engine)
    return process_schedule_text(session, text, term, schedule_id=schedule_id)


# ----------------------------
# Upload run lifecycle
# ----------------------------
def run_schedule_upload(
    factory: sessionmaker,
    schedule_id: int,
    pdf_path: str,
    engine: Optional[str] = None,
) -> ProcessSummary:
    """
    Process an uploaded FinalsSchedule row end to end.

    The status row moves pending -> processing -> completed | failed, each
    step committed on its own so a failed run is still recorded. Failures
    are re-raised after being recorded.
    """
    sid = str(schedule_id)

    # Phase A: mark processing (must persist even if parsing fails)
    with factory() as session:
        schedule = session.get(FinalsSchedule, schedule_id)
        if schedule is None:
            raise LookupError(f"No finals schedule with id={schedule_id}")
        schedule.status = "processing"
        session.commit()

    log_event(schedule_id=sid, status="processing", actor="pipeline", event="start", extra={"pdf": pdf_path})

    try:
        # Phase B: extraction + materialization in one transaction
        pdf_bytes = Path(pdf_path).read_bytes()
        with factory() as session:
            schedule = session.get(FinalsSchedule, schedule_id)
            summary = process_finals_schedule(session, pdf_bytes, schedule.term, engine=engine, schedule_id=sid)
            schedule.status = "completed"
            schedule.processed_at = _now_utc()
            schedule.stats = summary.stats()
            schedule.error_message = "\n".join(summary.errors) if summary.errors else None
            session.commit()

        log_event(schedule_id=sid, status="completed", actor="pipeline", event="finish", extra=summary.stats())
        return summary

    except Exception as e:
        # Phase C: mark failed in a fresh transaction
        with factory() as session:
            schedule = session.get(FinalsSchedule, schedule_id)
            schedule.status = "failed"
            schedule.processed_at = _now_utc()
            schedule.error_message = str(e)
            session.commit()

        log_event(schedule_id=sid, status="failed", actor="pipeline", event="error", extra={"error": str(e)})
        raise
