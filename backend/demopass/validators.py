"""
Input normalization and validation helpers.

Student fields follow the enrollment form rules: name of 3-50 characters,
a 10 digit mobile number and a plausible email address. Date helpers
convert client supplied ISO strings into naive UTC values, which is how
every timestamp is stored.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from demopass.errors import ValidationError

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50
MOBILE_PATTERN = re.compile(r"^\d{10}$")
EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def clean_text(value) -> Optional[str]:
    """Strip a string value; empty strings become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def validate_name(name: str) -> str:
    name = clean_text(name)
    if not name:
        raise ValidationError("Name is required")
    if len(name) < NAME_MIN_LENGTH:
        raise ValidationError("Name must be at least 3 characters long")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError("Name must be at most 50 characters long")
    return name


def validate_mobile_number(mobile_number: str) -> str:
    mobile_number = clean_text(mobile_number)
    if not mobile_number:
        raise ValidationError("Mobile number is required")
    if not MOBILE_PATTERN.match(mobile_number):
        raise ValidationError("Mobile number must be exactly 10 digits")
    return mobile_number


def validate_email(email: str) -> str:
    email = clean_text(email)
    if not email:
        raise ValidationError("Email is required")
    email = email.lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Please enter a valid email address")
    return email


def utc_now() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_midnight(moment: datetime) -> datetime:
    """
    Truncate a datetime to midnight of its UTC calendar day.

    Aware datetimes are converted to UTC first; naive ones are taken to be
    UTC already. The result is naive.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return datetime.combine(moment.date(), time.min)


def day_window(moment: datetime) -> tuple:
    """Return the [start, end) range of the UTC day containing moment."""
    start = utc_midnight(moment)
    return start, start + timedelta(days=1)


def parse_demo_date(value) -> date:
    """
    Parse a demo date given as YYYY-MM-DD or a full ISO 8601 datetime.

    Datetimes are reduced to their UTC calendar day.
    """
    if isinstance(value, datetime):
        return utc_midnight(value).date()
    if isinstance(value, date):
        return value
    text = clean_text(value)
    if not text:
        raise ValidationError("Demo dates must not be empty")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return utc_midnight(datetime.fromisoformat(text)).date()
    except ValueError:
        raise ValidationError("Invalid demo date: {}".format(value))


def parse_demo_dates(values) -> list:
    if values is None:
        raise ValidationError("demoDates is required")
    if not isinstance(values, (list, tuple)):
        raise ValidationError("demoDates must be a list of dates")
    return [parse_demo_date(v) for v in values]


def isoformat_utc(moment: Optional[datetime]) -> Optional[str]:
    """Serialize a naive UTC datetime as ISO 8601 with a Z suffix."""
    if moment is None:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat(timespec="milliseconds") + "Z"
