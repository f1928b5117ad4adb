# upsert FinalExam rows, create missing rooms, link courses

# finals_schedule/extraction/materializer.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Building, Course, FinalExam, Room, Term
from ..workflow_logger import log_line as _log
from .fields import split_room_refs
from .records import ExamEntry

SEASONS = ("FALL", "SPRING", "SUMMER", "WINTER")


@dataclass
class MaterializeResult:
    created: int = 0
    updated: int = 0
    linked: int = 0
    orphan: int = 0
    rooms_created: int = 0
    errors: List[str] = field(default_factory=list)


# ----------------------------
# Lookups
# ----------------------------
def parse_term_name(name: str) -> tuple[str, int]:
    """'Fall 2025' -> ('FALL', 2025)"""
    parts = name.strip().upper().split()
    if len(parts) != 2 or parts[0] not in SEASONS or not parts[1].isdigit():
        raise ValueError(f"Invalid term {name!r}; expected e.g. 'Fall 2025'")
    return parts[0], int(parts[1])


def find_term(session: Session, season: str, year: int) -> Optional[Term]:
    return session.query(Term).filter(Term.season == season.upper(), Term.year == year).one_or_none()


def find_or_create_term(session: Session, season: str, year: int) -> Term:
    term = find_term(session, season, year)
    if term is None:
        term = Term(season=season.upper(), year=year)
        session.add(term)
        session.flush()
        _log(f"Created term {term.display_name}")
    return term


def ensure_rooms_exist(session: Session, location: Optional[str]) -> int:
    """
    Create Room rows for building/room pairs named in the location that are
    not stored yet. Only buildings already known are considered.
    Returns the number of rooms created.
    """
    created = 0
    for abbreviation, number in split_room_refs(location):
        building = session.query(Building).filter(Building.abbreviation == abbreviation).one_or_none()
        if building is None:
            continue

        exists = (
            session.query(Room)
            .filter(Room.building_id == building.id, Room.number == number)
            .first()
        )
        if exists is not None:
            continue

        session.add(Room(building=building, number=number))
        session.flush()
        created += 1
        _log(f"Created room {number} in {building.name or building.abbreviation}")

    return created


# ----------------------------
# Upsert
# ----------------------------
def _upsert_exam(session: Session, entry: ExamEntry, term: Term) -> tuple[FinalExam, bool]:
    exam = (
        session.query(FinalExam)
        .filter(FinalExam.crn == entry.crn, FinalExam.term_id == term.id)
        .one_or_none()
    )
    was_new = exam is None
    if was_new:
        exam = FinalExam(crn=entry.crn, term=term)
        session.add(exam)

    course = (
        session.query(Course)
        .filter(Course.crn == entry.crn, Course.term_id == term.id)
        .one_or_none()
    )

    exam.course = course
    exam.exam_date = entry.exam_date
    exam.start_time = entry.start_time
    exam.end_time = entry.end_time
    exam.location = entry.location
    exam.combined_crns = list(entry.combined_crns)

    exam.validate()
    session.flush()
    return exam, was_new


def materialize_entries(session: Session, entries: Iterable[ExamEntry], term: Term) -> MaterializeResult:
    """
    Persist entries for a term. Each entry runs in its own SAVEPOINT: a failure
    is recorded in result.errors and the batch continues. The caller commits.
    """
    result = MaterializeResult()

    for entry in entries:
        try:
            with session.begin_nested():
                rooms_created = ensure_rooms_exist(session, entry.location)
                exam, was_new = _upsert_exam(session, entry, term)
        except (SQLAlchemyError, ValueError) as e:
            result.errors.append(f"Error processing CRN {entry.crn}: {e}")
            continue

        result.rooms_created += rooms_created
        if was_new:
            result.created += 1
        else:
            result.updated += 1
        if exam.course is not None:
            result.linked += 1
        else:
            result.orphan += 1

    return result


def link_orphan_exams(session: Session, term: Term) -> int:
    """Attach orphan exams of a term to courses imported since. Returns how many were linked."""
    linked = 0
    orphans = (
        session.query(FinalExam)
        .filter(FinalExam.term_id == term.id, FinalExam.course_id.is_(None))
        .all()
    )
    for exam in orphans:
        if exam.link_to_course(session) is not None:
            linked += 1
    session.flush()
    return linked
