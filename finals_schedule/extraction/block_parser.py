# Column-block layout: CRN block -> date block -> time block -> location block

# finals_schedule/extraction/block_parser.py
"""
Parser for the column-block layout (schedules with a COMBINED CRNs column).

pdftotext renders the wide table one column at a time: all CRNs, then all
exam dates, then all times, then all rooms. Position i across same-sized
blocks belongs to one exam group.

Strategy:
  1. classify every line with LINE_RULES (first matching rule wins)
  2. collapse consecutive same-tagged lines into Blocks
  3. anchor on each DATE block and pick the nearest preceding CRN block,
     the nearest following TIME block and, optionally, the nearest LOCATION
     block after that time block, all of the same size
  4. zip positions, one ExamEntry per CRN, first occurrence per CRN wins
"""
from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..workflow_logger import log_line as _log
from .fields import extract_date, extract_location, extract_time_range
from .normalizer import normalize_text, split_lines
from .records import MIN_CRN, Block, ClassifiedLine, ExamEntry, LineTag

MERGED_DIGITS_RE = re.compile(r"\d{10,}")
CRN_LINE_RE = re.compile(r"^\d{5}(?:-\d{5})*$")
CRN_GROUP_RE = re.compile(r"\d{5}(?:-\d{5})*")

WEEKDAY_DATE_RE = re.compile(r"^(Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday),", re.IGNORECASE)
BUILDING_PREFIX_RE = re.compile(r"[A-Z]{4,6}\s+\S")

LOCATION_LINE_RES = (
    re.compile(r"^[A-Z]{4,6}\s+[\dA-Z]{3,}(?:/[\dA-Z]+)*\s*$", re.IGNORECASE),
    re.compile(r"^[A-Z][A-Za-z]+\s+(?:Auditorium|Hall|Center|Room)\s*$", re.IGNORECASE),
    re.compile(r"^(?:ONLINE|TBA|VIRTUAL|SEE FACULTY)", re.IGNORECASE),
)

HEADER_RE = re.compile(
    r"COURSE SECTION|COMBINED CRNs|EXAM-DATE|EXAM-TIME|EXAM-ROOM|"
    r"(?:FALL|SPRING|SUMMER|WINTER) \d{4} FINAL|Page \d+",
    re.IGNORECASE,
)


# ----------------------------
# CRN lines
# ----------------------------
def repair_merged_crns(line: str) -> str:
    """
    "1458814589" -> "14588-14589"

    pdftotext drops the separator when two CRN columns wrap at the same
    position. Only digit runs that are an exact multiple of 5 long are split.
    """

    def _split(m: "re.Match[str]") -> str:
        run = m.group(0)
        if len(run) % 5:
            return run
        return "-".join(run[i : i + 5] for i in range(0, len(run), 5))

    return MERGED_DIGITS_RE.sub(_split, line)


def parse_crn_line(line: str) -> Tuple[int, ...]:
    """All CRNs on the line, in order, deduplicated, each >= 10,000."""
    out: List[int] = []
    for group in CRN_GROUP_RE.findall(repair_merged_crns(line)):
        for part in group.split("-"):
            n = int(part)
            if n >= MIN_CRN and n not in out:
                out.append(n)
    return tuple(out)


# ----------------------------
# Line classification
# ----------------------------
def is_crn_line(line: str) -> bool:
    return bool(CRN_LINE_RE.match(repair_merged_crns(line)))


def is_date_line(line: str) -> bool:
    return bool(WEEKDAY_DATE_RE.match(line))


def is_time_line(line: str) -> bool:
    start, _end = extract_time_range(line)
    if start is None:
        return False
    if is_date_line(line):  # "Wednesday, Dec 10 ... 10:15AM-12:15PM"
        return False
    if BUILDING_PREFIX_RE.search(line):  # building code -> location
        return False
    return True


def is_location_line(line: str) -> bool:
    return any(rx.match(line) for rx in LOCATION_LINE_RES)


# Evaluated top to bottom; the first predicate that accepts a line decides its tag.
# Dates precede times so a weekday line carrying a time range stays a date.
LINE_RULES: Tuple[Tuple[LineTag, Callable[[str], bool]], ...] = (
    (LineTag.CRN, is_crn_line),
    (LineTag.DATE, is_date_line),
    (LineTag.TIME, is_time_line),
    (LineTag.LOCATION, is_location_line),
)


def classify_line(line: str) -> LineTag:
    for tag, predicate in LINE_RULES:
        if predicate(line):
            return tag
    return LineTag.OTHER


def is_header_line(line: str) -> bool:
    return bool(HEADER_RE.search(line))


def classify_lines(lines: Sequence[str]) -> List[ClassifiedLine]:
    kept = [ln for ln in lines if not is_header_line(ln)]
    return [ClassifiedLine(index=i, text=ln, tag=classify_line(ln)) for i, ln in enumerate(kept)]


# ----------------------------
# Blocks
# ----------------------------
def _decode(tag: LineTag, line: str) -> object:
    if tag == LineTag.CRN:
        return parse_crn_line(line)
    if tag == LineTag.DATE:
        return extract_date(line)
    if tag == LineTag.TIME:
        return extract_time_range(line)
    if tag == LineTag.LOCATION:
        return extract_location(line)
    return line


def build_blocks(classified: Sequence[ClassifiedLine]) -> List[Block]:
    """Maximal runs of same-tagged lines, in document order."""
    blocks: List[Block] = []
    run: List[ClassifiedLine] = []

    def flush() -> None:
        if run:
            blocks.append(
                Block(
                    tag=run[0].tag,
                    start_idx=run[0].index,
                    end_idx=run[-1].index,
                    values=tuple(_decode(item.tag, item.text) for item in run),
                )
            )
            run.clear()

    for item in classified:
        if run and item.tag != run[0].tag:
            flush()
        run.append(item)
    flush()
    return blocks


def _nearest_before(blocks: Sequence[Block], anchor: Block, size: int) -> Optional[Block]:
    found = None
    for b in blocks:
        if b.end_idx < anchor.start_idx and b.size == size:
            found = b
    return found


def _nearest_after(blocks: Sequence[Block], anchor: Block, size: int) -> Optional[Block]:
    for b in blocks:
        if b.start_idx > anchor.end_idx and b.size == size:
            return b
    return None


def align_blocks(blocks: Sequence[Block]) -> List[Tuple[Block, Block, Block, Optional[Block]]]:
    """
    (crn, date, time, location) groups, one per usable DATE block.
    Location is None when no same-sized location block follows the time block.
    """
    by_tag: Dict[LineTag, List[Block]] = {tag: [] for tag in LineTag}
    for b in blocks:
        by_tag[b.tag].append(b)

    groups: List[Tuple[Block, Block, Block, Optional[Block]]] = []
    for date_block in by_tag[LineTag.DATE]:
        n = date_block.size

        crn_block = _nearest_before(by_tag[LineTag.CRN], date_block, n)
        if crn_block is None:
            _log(f"Skipping date block at line {date_block.start_idx}: no preceding CRN block of size {n}")
            continue

        time_block = _nearest_after(by_tag[LineTag.TIME], date_block, n)
        if time_block is None:
            _log(f"Skipping date block at line {date_block.start_idx}: no following time block of size {n}")
            continue

        location_block = _nearest_after(by_tag[LineTag.LOCATION], time_block, n)
        groups.append((crn_block, date_block, time_block, location_block))
    return groups


# ----------------------------
# Public API
# ----------------------------
def parse_block_layout(text: str) -> List[ExamEntry]:
    """Parse column-block schedule text into exam entries (first occurrence per CRN)."""
    lines = split_lines(normalize_text(text))
    blocks = build_blocks(classify_lines(lines))

    entries: List[ExamEntry] = []
    for crn_block, date_block, time_block, location_block in align_blocks(blocks):
        for i in range(date_block.size):
            crns = crn_block.values[i]
            exam_date = date_block.values[i]
            start, end = time_block.values[i]
            location = location_block.values[i] if location_block else None

            if exam_date is None or start is None or end is None or not crns:
                continue

            for crn in crns:
                try:
                    entries.append(
                        ExamEntry(
                            crn=crn,
                            combined_crns=crns,
                            exam_date=exam_date,
                            start_time=start,
                            end_time=end,
                            location=location,
                        )
                    )
                except ValueError as e:
                    _log(f"Dropping CRN {crn}: {e}")

    seen: set[int] = set()
    out: List[ExamEntry] = []
    for e in entries:
        if e.crn not in seen:
            seen.add(e.crn)
            out.append(e)
    return out
