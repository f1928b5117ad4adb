from __future__ import annotations

from datetime import datetime, timedelta
from typing import List

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Session, declarative_base, relationship
from sqlalchemy.sql import func

from .clock import format_minutes_12h, format_minutes_24h

Base = declarative_base()


class Term(Base):
    __tablename__ = "terms"
    __table_args__ = (UniqueConstraint("season", "year", name="uq_terms_season_year"),)

    id = Column(Integer, primary_key=True)
    season = Column(String(16), nullable=False)  # FALL / SPRING / SUMMER / WINTER
    year = Column(Integer, nullable=False)
    name = Column(Text)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    courses = relationship("Course", back_populates="term")
    final_exams = relationship("FinalExam", back_populates="term")

    @property
    def display_name(self) -> str:
        return self.name or f"{self.season.title()} {self.year}"


class Building(Base):
    __tablename__ = "buildings"

    id = Column(Integer, primary_key=True)
    abbreviation = Column(String(8), nullable=False, unique=True)
    name = Column(Text)

    rooms = relationship("Room", back_populates="building", cascade="all, delete-orphan")


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (UniqueConstraint("building_id", "number", name="uq_rooms_building_number"),)

    id = Column(Integer, primary_key=True)
    building_id = Column(Integer, ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False)
    number = Column(Integer, nullable=False)

    building = relationship("Building", back_populates="rooms")

    @property
    def formatted_number(self) -> str:
        return f"{self.number:03d}"


class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (UniqueConstraint("crn", "term_id", name="uq_courses_crn_term"),)

    id = Column(Integer, primary_key=True)
    crn = Column(Integer, nullable=False)
    term_id = Column(Integer, ForeignKey("terms.id"), nullable=False)

    subject = Column(String(8))
    course_number = Column(String(8))
    section_number = Column(String(8))
    title = Column(Text)

    term = relationship("Term", back_populates="courses")
    final_exam = relationship("FinalExam", back_populates="course", uselist=False)


class FinalExam(Base):
    __tablename__ = "final_exams"
    # one final exam per CRN per term
    __table_args__ = (UniqueConstraint("crn", "term_id", name="uq_final_exams_crn_term"),)

    id = Column(Integer, primary_key=True)
    crn = Column(Integer, nullable=False)
    term_id = Column(Integer, ForeignKey("terms.id"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"))  # NULL = orphan (course not imported yet)

    exam_date = Column(Date, nullable=False)
    start_time = Column(Integer, nullable=False)  # minute of day
    end_time = Column(Integer, nullable=False)
    location = Column(Text)
    combined_crns = Column(JSON)
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    term = relationship("Term", back_populates="final_exams")
    course = relationship("Course", back_populates="final_exam")

    def validate(self) -> None:
        if self.crn is None:
            raise ValueError("crn can't be blank")
        if self.exam_date is None or self.start_time is None or self.end_time is None:
            raise ValueError(f"CRN {self.crn}: exam date, start time and end time are required")
        if self.end_time <= self.start_time:
            raise ValueError(f"CRN {self.crn}: end time must be after start time")

    @property
    def is_orphan(self) -> bool:
        return self.course_id is None and self.course is None

    @property
    def is_linked(self) -> bool:
        return not self.is_orphan

    @property
    def formatted_start_time(self) -> str | None:
        return format_minutes_24h(self.start_time) if self.start_time is not None else None

    @property
    def formatted_end_time(self) -> str | None:
        return format_minutes_24h(self.end_time) if self.end_time is not None else None

    @property
    def formatted_start_time_ampm(self) -> str | None:
        return format_minutes_12h(self.start_time) if self.start_time is not None else None

    @property
    def formatted_end_time_ampm(self) -> str | None:
        return format_minutes_12h(self.end_time) if self.end_time is not None else None

    @property
    def duration_hours(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) / 60.0

    @property
    def time_of_day(self) -> str | None:
        if self.start_time is None:
            return None
        hour = self.start_time // 60
        if hour < 12:
            return "morning"
        if hour <= 16:
            return "afternoon"
        return "evening"

    @property
    def combined_crns_display(self) -> str:
        return ", ".join(str(c) for c in (self.combined_crns or [self.crn]))

    @property
    def course_code(self) -> str:
        if self.course is None:
            return f"CRN {self.crn}"
        c = self.course
        return f"{c.subject}-{c.course_number}-{c.section_number}"

    def link_to_course(self, session: Session) -> Course | None:
        """Attach the Course with this exam's crn/term, if one exists. Already linked exams are left alone."""
        if self.course is not None:
            return self.course
        found = session.query(Course).filter(Course.crn == self.crn, Course.term_id == self.term_id).one_or_none()
        if found is not None:
            self.course = found
        return found

    def matched_rooms(self, session: Session) -> List[Room]:
        """
        Room rows named by the location string ("CEIS 414A / CEIS 414B").
        Unknown buildings and rooms are skipped; may be empty.
        """
        from .extraction.fields import split_room_refs

        rooms: List[Room] = []
        for abbreviation, number in split_room_refs(self.location):
            room = (
                session.query(Room)
                .join(Building)
                .filter(Building.abbreviation == abbreviation, Room.number == number)
                .one_or_none()
            )
            if room is not None and room not in rooms:
                rooms.append(room)
        return rooms

    def rooms_matched(self, session: Session) -> bool:
        return bool(self.matched_rooms(session))

    def location_with_names(self, session: Session) -> str | None:
        """'Wentworth Hall 212' when the rooms are known, else the raw location."""
        rooms = self.matched_rooms(session)
        if not rooms:
            return self.location
        return " / ".join(f"{r.building.name or r.building.abbreviation} {r.formatted_number}" for r in rooms)

    @property
    def start_datetime(self) -> datetime | None:
        if self.exam_date is None or self.start_time is None:
            return None
        return datetime.combine(self.exam_date, datetime.min.time()) + timedelta(minutes=self.start_time)

    @property
    def end_datetime(self) -> datetime | None:
        if self.exam_date is None or self.end_time is None:
            return None
        return datetime.combine(self.exam_date, datetime.min.time()) + timedelta(minutes=self.end_time)


class FinalsSchedule(Base):
    """One uploaded schedule document and the outcome of processing it."""

    __tablename__ = "finals_schedules"

    id = Column(Integer, primary_key=True)
    term_id = Column(Integer, ForeignKey("terms.id"), nullable=False)
    filename = Column(Text)

    status = Column(String(16), nullable=False, default="pending")  # pending / processing / completed / failed
    stats = Column(JSON)
    error_message = Column(Text)
    processed_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    term = relationship("Term")
