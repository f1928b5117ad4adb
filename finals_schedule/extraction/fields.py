# extract_date, extract_time_range, extract_location (+ room list expansion)

# finals_schedule/extraction/fields.py
from __future__ import annotations

import calendar
import re
from datetime import date
from typing import List, Optional, Tuple

from ..clock import to_minutes
from ..workflow_logger import log_line as _log

NUMERIC_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
FULL_MONTH_DATE_RE = re.compile(
    r"(January|February|March|April|May|June|July|August|September|October|November|December)"
    r"\s+(\d{1,2}),?\s+(\d{4})",
    re.IGNORECASE,
)
ABBR_MONTH_DATE_RE = re.compile(
    r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+(\d{1,2}),?\s+(\d{4})",
    re.IGNORECASE,
)

# "8:00AM-10:00AM", "10:15 AM - 12:15 PM"
TIME_RANGE_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)\s*-\s*(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)
# "9:00AM - 1PM"
TIME_RANGE_SHORT_END_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)\s*-\s*(\d{1,2})\s*(AM|PM)", re.IGNORECASE)
# "0800-1000"
MILITARY_RANGE_RE = re.compile(r"\b(\d{2})(\d{2})\s*-\s*(\d{2})(\d{2})\b")
YEAR_WORD_RE = re.compile(r"\b(?:ACADEMIC\s+)?YEARS?\b", re.IGNORECASE)

SEASON_HEADER_RE = re.compile(r"^(?:SPRING|FALL|SUMMER|WINTER)\s+\d{4}$", re.IGNORECASE)
# room must start with a digit and be >= 3 chars ("STUDIO 01" is a course title)
BUILDING_ROOM_RE = re.compile(r"([A-Z]{4,6})\s+(\d[\dA-Z]{2,}(?:/[\dA-Z]+)*)\s*$", re.IGNORECASE)
NAMED_VENUE_RE = re.compile(r"([A-Z][A-Za-z]+\s+(?:Auditorium|Hall|Center|Room))\s*$")
REMOTE_RE = re.compile(r"(ONLINE|TBA|VIRTUAL)", re.IGNORECASE)
SEE_FACULTY_RE = re.compile(r"SEE FACULTY", re.IGNORECASE)
BARE_BUILDING_RE = re.compile(r"^([A-Z]{4,6})\s*$")

NO_EXAM_RE = re.compile(r"^(ONLINE|TBA|VIRTUAL|SEE FACULTY)", re.IGNORECASE)
ROOM_REF_RE = re.compile(r"([A-Z]+)\s+(\d+)([A-Z])?", re.IGNORECASE)

SEE_FACULTY = "SEE FACULTY"

_MONTHS = {name.lower(): i for i, name in enumerate(calendar.month_name) if name}
_MONTH_ABBRS = {name.lower(): i for i, name in enumerate(calendar.month_abbr) if name}


# ----------------------------
# Dates
# ----------------------------
def extract_date(line: str) -> Optional[date]:
    """
    First date found in the line:
      12/08/2025
      December 8, 2025 / Monday, December 8 2025
      Dec 8, 2025

    Impossible components ("02/30/2025") give None.
    """
    try:
        m = NUMERIC_DATE_RE.search(line)
        if m:
            return date(int(m.group(3)), int(m.group(1)), int(m.group(2)))

        m = FULL_MONTH_DATE_RE.search(line)
        if m:
            return date(int(m.group(3)), _MONTHS[m.group(1).lower()], int(m.group(2)))

        m = ABBR_MONTH_DATE_RE.search(line)
        if m:
            return date(int(m.group(3)), _MONTH_ABBRS[m.group(1).lower()], int(m.group(2)))
    except ValueError as e:
        _log(f"Failed to parse date from: {line.strip()} ({e})")
        return None

    return None


# ----------------------------
# Times (minute of day)
# ----------------------------
def _valid_12h(hour: int, minute: int) -> bool:
    return 1 <= hour <= 12 and 0 <= minute <= 59


def extract_time_range(line: str) -> Tuple[Optional[int], Optional[int]]:
    """
    Returns (start, end) in minutes since midnight, or (None, None).
    Both ends must parse for a match.
    """
    m = TIME_RANGE_RE.search(line)
    if m:
        sh, sm, smer, eh, em, emer = m.groups()
        if _valid_12h(int(sh), int(sm)) and _valid_12h(int(eh), int(em)):
            return to_minutes(int(sh), int(sm), smer), to_minutes(int(eh), int(em), emer)
        return None, None

    m = TIME_RANGE_SHORT_END_RE.search(line)
    if m:
        sh, sm, smer, eh, emer = m.groups()
        if _valid_12h(int(sh), int(sm)) and _valid_12h(int(eh), 0):
            return to_minutes(int(sh), int(sm), smer), to_minutes(int(eh), 0, emer)
        return None, None

    m = MILITARY_RANGE_RE.search(line)
    if m and not _is_year_span(line, m):
        sh, sm, eh, em = (int(g) for g in m.groups())
        start, end = sh * 60 + sm, eh * 60 + em
        if sh <= 23 and eh <= 23 and sm <= 59 and em <= 59 and start < end:
            return start, end

    return None, None


def _is_year_span(line: str, m: "re.Match[str]") -> bool:
    """'Academic Year 2025-2026' or a bare '2025-2026' are years, not 20:25-20:26."""
    if YEAR_WORD_RE.search(line):
        return True
    first, second = int(m.group(1) + m.group(2)), int(m.group(3) + m.group(4))
    return second == first + 1


# ----------------------------
# Locations
# ----------------------------
def extract_location(line: str) -> Optional[str]:
    """
    Location at the end of a line, or a remote/faculty sentinel.

    "WENTW 212", "CEIS 414A/B" -> "CEIS 414A / CEIS 414B", "WATSN Auditorium",
    "ONLINE" / "TBA" / "VIRTUAL", "SEE FACULTY", bare "WENTW".
    """
    stripped = line.strip()

    # page headers like "FALL 2025" look like building + room
    if SEASON_HEADER_RE.match(stripped):
        return None

    m = BUILDING_ROOM_RE.search(stripped)
    if m:
        building, rooms = m.group(1), m.group(2)
        if "/" in rooms:
            return expand_room_list(building, rooms)
        return f"{building} {rooms}"

    m = NAMED_VENUE_RE.search(stripped)
    if m:
        return m.group(1).strip()

    m = REMOTE_RE.search(stripped)
    if m:
        return m.group(1).upper()

    # before the bare building code: "SEE FACULTY" is not a building
    if SEE_FACULTY_RE.search(stripped):
        return SEE_FACULTY

    m = BARE_BUILDING_RE.match(stripped)
    if m:
        return m.group(1)

    return None


def expand_room_list(building: str, rooms: str) -> str:
    """
    "002/004" -> "BLDG 002 / BLDG 004"
    "414A/B"  -> "BLDG 414A / BLDG 414B"
    """
    parts = [p for p in rooms.split("/") if p]
    if len(parts) <= 1:
        return f"{building} {rooms}"

    out: List[str] = []
    base_number: Optional[str] = None
    for part in parts:
        digits = re.match(r"^\d+", part)
        if digits:
            base_number = digits.group(0)
            out.append(f"{building} {part}")
        elif base_number and part.isalpha():
            out.append(f"{building} {base_number}{part}")
        else:
            out.append(f"{building} {part}")
    return " / ".join(out)


def is_no_exam_marker(line: str) -> bool:
    return bool(NO_EXAM_RE.match(line.strip()))


def split_room_refs(location: Optional[str]) -> List[Tuple[str, int]]:
    """
    (building abbreviation, room number) pairs named by a location string.
    "CEIS 414A / CEIS 414B" -> [("CEIS", 414), ("CEIS", 414)]
    """
    if not location:
        return []
    refs: List[Tuple[str, int]] = []
    for part in location.split(" / "):
        m = ROOM_REF_RE.search(part)
        if m:
            refs.append((m.group(1).upper(), int(m.group(2))))
    return refs
