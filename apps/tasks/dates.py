"""Due date normalization to plain calendar dates (YYYY-MM-DD)."""

import re
from datetime import date, datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional
from framework.exceptions.handler import ValidationError

DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Marker for "field not supplied", distinct from an explicit null
UNSET = object()


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00") if value.endswith("Z") else value)
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None


def normalize_date_only(value: Any) -> Any:
    """
    Normalize a due date.

    - UNSET stays UNSET (field not supplied)
    - None, "" and whitespace clear the date (None)
    - "YYYY-MM-DD" passes through unchanged once it is a real calendar date
    - other ISO-8601 / RFC 2822 timestamps become their UTC calendar date; naive
      timestamps are read as UTC
    - anything else raises ValidationError
    """
    if value is UNSET:
        return UNSET
    if value is None:
        return None
    if isinstance(value, datetime):
        return _utc_date(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValidationError("dueDate must be a string (YYYY-MM-DD) or null")

    s = value.strip()
    if not s:
        return None

    if DATE_ONLY.match(s):
        try:
            date.fromisoformat(s)
        except ValueError:
            raise ValidationError("dueDate is not a valid date")
        return s

    parsed = _parse_timestamp(s)
    if parsed is None:
        raise ValidationError("dueDate is not a valid date")
    return _utc_date(parsed).isoformat()


def _utc_date(value: datetime) -> date:
    if value.tzinfo is None:
        return value.date()
    try:
        return value.astimezone(timezone.utc).date()
    except OverflowError:
        # UTC day falls before year 1 or after year 9999
        raise ValidationError("dueDate is not a valid date")


def to_date(normalized: Optional[str]) -> Optional[date]:
    """Column value for a normalized string."""
    return date.fromisoformat(normalized) if normalized else None
