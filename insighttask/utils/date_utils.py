"""
Calendar date helpers

Due dates carry no time component. Everything here compares by local
calendar date only.
"""

from datetime import date, datetime
from typing import Optional, Union


def get_current_date() -> date:
    """
    Get today's local calendar date

    Returns:
        Current local date
    """
    return datetime.now().date()


def parse_due_date(value: Union[None, str, date, datetime]) -> Optional[date]:
    """
    Parse a due date coming from the store or from user input

    Accepts "YYYY-MM-DD", a full ISO timestamp (its local calendar date is
    kept), a date or a datetime. Empty values become None.

    Args:
        value: Raw due date value

    Returns:
        Calendar date or None

    Raises:
        ValueError: If the string is not an ISO date or timestamp
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return to_local_date(value)

    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    if len(text) == 10:
        return date.fromisoformat(text)

    return to_local_date(datetime.fromisoformat(text.replace("Z", "+00:00")))


def to_local_date(value: Union[date, datetime]) -> date:
    """Calendar date of a date or datetime in local time"""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def is_same_day(left: Optional[Union[date, datetime]], right: Union[date, datetime]) -> bool:
    """
    Check whether two values fall on the same local calendar day

    Args:
        left: First value (None never matches)
        right: Second value

    Returns:
        True if both are on the same calendar day
    """
    if left is None:
        return False
    return to_local_date(left) == to_local_date(right)
