# Column-per-line layout: anchor on standalone CRN lines, scan date -> time -> location

# finals_schedule/extraction/row_parser.py
"""
Parser for the interleaved row layout (schedules with FINAL DAY / FINAL DATE
and MULTI-SECTION CRNS columns).

Each printed row becomes a run of lines. A row starts at a line holding only
a 5-digit CRN, optionally followed by a dash-joined chain of the CRNs sharing
the exam ("27975-27976"). The scan then looks for a date, then a time range,
and takes the line after the time as the location.

Some groups print the date/time on one row only. After the pass, rows with
no date borrow date/time from a complete row with the same combined-CRN set.
Rows still lacking date or time are dropped.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..workflow_logger import log_line as _log
from .fields import extract_date, extract_location, extract_time_range
from .normalizer import normalize_text, split_lines
from .records import ExamEntry, RowRecord

ANCHOR_RE = re.compile(r"^\d{5}$")
CHAIN_RE = re.compile(r"^\d{5}(?:-\d{5})+$")


def is_anchor(line: str) -> bool:
    return bool(ANCHOR_RE.match(line))


def _read_row(lines: Sequence[str], i: int) -> RowRecord:
    crn = int(lines[i])
    combined: Tuple[int, ...] = (crn,)
    chain: Tuple[int, ...] = ()
    j = i + 1

    if j < len(lines) and CHAIN_RE.match(lines[j]):
        chain = tuple(int(x) for x in lines[j].split("-"))
        # the entry must list its own CRN; the group stays the printed chain
        combined = chain if crn in chain else (crn,) + chain
        j += 1

    exam_date = None
    start = end = None
    location: Optional[str] = None

    while j < len(lines):
        line = lines[j]
        if is_anchor(line):
            break

        if exam_date is None:
            exam_date = extract_date(line)
            j += 1
            continue

        st, et = extract_time_range(line)
        if st is not None:
            start, end = st, et
            if j + 1 < len(lines) and not is_anchor(lines[j + 1]):
                location = extract_location(lines[j + 1])
            break

        j += 1

    return RowRecord(
        crn=crn,
        combined_crns=combined,
        exam_date=exam_date,
        start_time=start,
        end_time=end,
        location=location,
        group_crns=chain,
    )


def read_rows(lines: Sequence[str]) -> List[RowRecord]:
    return [_read_row(lines, i) for i, line in enumerate(lines) if is_anchor(line)]


def backfill_rows(rows: Sequence[RowRecord]) -> List[RowRecord]:
    """
    Fill rows without a date from the first complete row of their combined-CRN group.
    Rows that already have a date are returned unchanged.
    """
    donors: Dict[Tuple[int, ...], RowRecord] = {}
    for r in rows:
        if r.is_complete:
            donors.setdefault(r.group_key, r)

    return [r.backfilled_from(donors.get(r.group_key)) for r in rows]


def parse_row_layout(text: str) -> List[ExamEntry]:
    """Parse interleaved-row schedule text into exam entries, in document order."""
    lines = split_lines(normalize_text(text))
    rows = backfill_rows(read_rows(lines))

    entries: List[ExamEntry] = []
    for row in rows:
        try:
            entry = row.promote()
        except ValueError as e:
            _log(f"Dropping CRN {row.crn}: {e}")
            continue
        if entry is not None:
            entries.append(entry)
    return entries
