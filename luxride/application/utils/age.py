from __future__ import annotations

from datetime import date, datetime


def parse_date(value: date | datetime | str) -> date:
    """
    Coerce a date, datetime or ISO string into a calendar date.

    Accepts "YYYY-MM-DD" as well as full ISO datetimes ("2024-06-15T10:00:00Z").
    Raises ValueError when the value cannot be read as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")

    text = value.strip()
    if not text:
        raise ValueError("Empty date value")
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


def calculate_age(date_of_birth: date | datetime | str, today: date | None = None) -> int:
    dob = parse_date(date_of_birth)
    today = today or date.today()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age


def try_calculate_age(date_of_birth: date | datetime | str | None, today: date | None = None) -> int | None:
    """Age for a possibly missing or malformed birth date; None when it can't be read."""
    if date_of_birth in (None, ""):
        return None
    try:
        return calculate_age(date_of_birth, today)
    except ValueError:
        return None
