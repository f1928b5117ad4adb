# finals_schedule/extraction/detector.py
from __future__ import annotations

import re

from .records import ScheduleFormat

COMBINED_CRNS_RE = re.compile(r"COMBINED\s+CRNs", re.IGNORECASE)
EXAM_COLUMN_RE = re.compile(r"EXAM-(?:DATE|TIME-OF-DAY|TIME|ROOM)", re.IGNORECASE)

FINAL_DAY_RE = re.compile(r"FINAL\s+(?:DAY|DATE)", re.IGNORECASE)
MULTI_SECTION_RE = re.compile(r"MULTI-SECTION\s+CRNS", re.IGNORECASE)


def detect_format(text: str) -> ScheduleFormat:
    """
    Classify normalized schedule text by its column headers.

    Block-zipper headers are checked before state-machine headers.
    """
    if not text:
        return ScheduleFormat.UNKNOWN

    if COMBINED_CRNS_RE.search(text) and EXAM_COLUMN_RE.search(text):
        return ScheduleFormat.BLOCK_ZIPPER

    if FINAL_DAY_RE.search(text) and MULTI_SECTION_RE.search(text):
        return ScheduleFormat.STATE_MACHINE

    return ScheduleFormat.UNKNOWN
