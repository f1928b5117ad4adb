# finals_schedule/extraction/__init__.py
"""
Finals schedule extraction package.

Public API:
- parse_schedule_text(text) -> ParseResult
- process_schedule_text(session, text, term) -> ProcessSummary
- process_finals_schedule(session, pdf_bytes, term) -> ProcessSummary
- run_schedule_upload(factory, schedule_id, pdf_path) -> ProcessSummary
"""

from .pdf_text import TextExtractionError
from .pipeline import parse_schedule_text, process_finals_schedule, process_schedule_text, run_schedule_upload
from .records import ExamEntry, ParseResult, ScheduleFormat

__all__ = [
    "ExamEntry",
    "ParseResult",
    "ScheduleFormat",
    "TextExtractionError",
    "parse_schedule_text",
    "process_finals_schedule",
    "process_schedule_text",
    "run_schedule_upload",
]
