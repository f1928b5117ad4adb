# finals_schedule/clock.py
from __future__ import annotations


def to_minutes(hour: int, minute: int, meridiem: str) -> int:
    """12-hour clock to minute of day. 12 AM -> 0, 12 PM stays noon."""
    if hour == 12:
        hour = 0
    if meridiem.upper() == "PM":
        hour += 12
    return hour * 60 + minute


def format_minutes_12h(minutes: int) -> str:
    """765 -> '12:45 PM'"""
    hour, minute = divmod(minutes, 60)
    meridiem = "PM" if hour >= 12 else "AM"
    hour %= 12
    if hour == 0:
        hour = 12
    return f"{hour}:{minute:02d} {meridiem}"


def format_minutes_24h(minutes: int) -> str:
    """765 -> '12:45'"""
    hour, minute = divmod(minutes, 60)
    return f"{hour:02d}:{minute:02d}"
