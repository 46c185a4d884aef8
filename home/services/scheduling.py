"""Date and time handling for job scheduling."""

import re
from datetime import date, datetime
from typing import Iterable

from home.models.job import JOB_COMPLETED
from home.schemas.job import Job
from home.utils.exceptions import ValidationError

_TIME_24 = re.compile(r"^(\d{1,2}):(\d{2})$")
_TIME_12 = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp][Mm])$")


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD calendar day."""
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def to_24_hour(value: str) -> str:
    """
    Normalize a time of day to 24-hour HH:MM.

    Accepts "14:30", "9:05" and 12-hour forms such as "2:30 PM" or "12:00 am".
    """
    text = value.strip()
    match = _TIME_12.match(text)
    if match:
        hour, minute, meridiem = int(match[1]), int(match[2]), match[3].upper()
        if not 1 <= hour <= 12:
            raise ValidationError(f"Invalid time '{value}'")
        if meridiem == "AM":
            hour = 0 if hour == 12 else hour
        else:
            hour = 12 if hour == 12 else hour + 12
    else:
        match = _TIME_24.match(text)
        if not match:
            raise ValidationError(f"Invalid time '{value}', expected HH:MM")
        hour, minute = int(match[1]), int(match[2])
        if hour > 23:
            raise ValidationError(f"Invalid time '{value}'")
    if minute > 59:
        raise ValidationError(f"Invalid time '{value}'")
    return f"{hour:02d}:{minute:02d}"


def find_schedule_conflicts(
    jobs: Iterable[Job], contractor_id: str, day: str, exclude_job_id: str
) -> list[Job]:
    """
    Other open jobs of the same contractor booked on the same day.

    Advisory only: callers report these, they never block a schedule.
    """
    return [
        job
        for job in jobs
        if job.contractor_id == contractor_id
        and job.id != exclude_job_id
        and job.scheduled_date == day
        and job.status != JOB_COMPLETED
    ]
