# LineTag, Block, RowRecord, ExamEntry, ParseResult

# finals_schedule/extraction/records.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple

MIN_CRN = 10_000
MINUTES_PER_DAY = 24 * 60


class LineTag(str, Enum):
    CRN = "crn"
    DATE = "date"
    TIME = "time"
    LOCATION = "location"
    OTHER = "other"


class ScheduleFormat(str, Enum):
    BLOCK_ZIPPER = "block_zipper"
    STATE_MACHINE = "state_machine"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedLine:
    index: int
    text: str
    tag: LineTag


@dataclass(frozen=True)
class Block:
    """
    Run of consecutive same-tagged lines.

    start_idx/end_idx are positions in the classified line sequence (inclusive).
    values holds one decoded value per line:
      CRN      -> tuple[int, ...]
      DATE     -> date | None
      TIME     -> (start, end) minutes
      LOCATION -> str | None
    """

    tag: LineTag
    start_idx: int
    end_idx: int
    values: Tuple[object, ...]

    @property
    def size(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class ExamEntry:
    crn: int
    combined_crns: Tuple[int, ...]
    exam_date: date
    start_time: int
    end_time: int
    location: Optional[str] = None

    def __post_init__(self) -> None:
        if self.crn < MIN_CRN:
            raise ValueError(f"CRN {self.crn} is below {MIN_CRN}")
        if self.crn not in self.combined_crns:
            raise ValueError(f"CRN {self.crn} missing from combined CRNs {self.combined_crns}")
        if not isinstance(self.exam_date, date):
            raise ValueError(f"CRN {self.crn}: exam date is required")
        for t in (self.start_time, self.end_time):
            if not 0 <= t < MINUTES_PER_DAY:
                raise ValueError(f"CRN {self.crn}: time {t} outside 0..{MINUTES_PER_DAY - 1}")
        if self.start_time >= self.end_time:
            raise ValueError(f"CRN {self.crn}: start {self.start_time} must be before end {self.end_time}")

    def as_dict(self) -> dict:
        return {
            "crn": self.crn,
            "combined_crns": list(self.combined_crns),
            "date": self.exam_date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "location": self.location,
        }


@dataclass(frozen=True)
class RowRecord:
    """
    One anchored row of the state-machine layout. Any of the exam fields may
    still be missing; promote() yields an ExamEntry only once date, start and
    end are all present.
    """

    crn: int
    combined_crns: Tuple[int, ...]
    exam_date: Optional[date] = None
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    location: Optional[str] = None
    # CRNs as printed on the chain line; empty when the row has no chain
    group_crns: Tuple[int, ...] = ()

    @property
    def group_key(self) -> Tuple[int, ...]:
        return tuple(sorted(self.group_crns or self.combined_crns))

    @property
    def is_complete(self) -> bool:
        return self.exam_date is not None and self.start_time is not None and self.end_time is not None

    def backfilled_from(self, donor: Optional["RowRecord"]) -> "RowRecord":
        """Copy date/start/end (and location when unset) from donor if this row has no date."""
        if self.exam_date is not None or donor is None or donor.exam_date is None:
            return self
        return replace(
            self,
            exam_date=donor.exam_date,
            start_time=donor.start_time,
            end_time=donor.end_time,
            location=self.location or donor.location,
        )

    def promote(self) -> Optional[ExamEntry]:
        if not self.is_complete:
            return None
        return ExamEntry(
            crn=self.crn,
            combined_crns=self.combined_crns,
            exam_date=self.exam_date,
            start_time=self.start_time,
            end_time=self.end_time,
            location=self.location,
        )


@dataclass
class ParseResult:
    format: ScheduleFormat
    entries: List[ExamEntry] = field(default_factory=list)
    detected: ScheduleFormat = ScheduleFormat.UNKNOWN
    ambiguous: bool = False
    line_count: int = 0
