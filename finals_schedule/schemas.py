from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class ExamEntryOut(BaseModel):
    crn: int
    combined_crns: List[int]
    exam_date: date
    start_time: int = Field(ge=0, le=1439)
    end_time: int = Field(ge=0, le=1439)
    start: str
    end: str
    location: Optional[str] = None


class ParseOut(BaseModel):
    format: str
    detected: str
    format_ambiguous: bool = False
    line_count: int
    entries: List[ExamEntryOut]


class ProcessSummary(BaseModel):
    total: int = 0
    created: int = 0
    updated: int = 0
    linked: int = 0
    orphan: int = 0
    rooms_created: int = 0
    errors: List[str] = Field(default_factory=list)
    # which parser produced the entries; ambiguous when detection failed and both parsers tied
    format: str
    format_ambiguous: bool = False

    def stats(self) -> dict:
        return self.model_dump(include={"total", "created", "updated", "linked", "orphan", "rooms_created"})
