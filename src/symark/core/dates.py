"""Human-readable and OpenGraph renderings of note timestamps."""

import re
from datetime import datetime

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_COMPACT_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})(?:T(\d{2})(\d{2}))?")
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:T(\d{2}):(\d{2}))?")


def ordinal(day: int) -> str:
    if day in (1, 21, 31):
        return f"{day}st"
    if day in (2, 22):
        return f"{day}nd"
    if day in (3, 23):
        return f"{day}rd"
    return f"{day}th"


def _clock(hour: int, minute: int) -> str:
    hour12 = 12 if hour == 0 else hour - 12 if hour > 12 else hour
    am_pm = "PM" if hour >= 12 else "AM"
    return f"{hour12}:{minute:02d} {am_pm}"


def naturalize_date(value: str) -> str:
    """
    Turn a stored timestamp into reading form.

    Accepts the compact `YYYYMMDD[Thhmm]` form and ISO
    `YYYY-MM-DD[Thh:mm]`; a bare 14-digit timestamp reads as a date only.
    Anything else is returned unchanged.

    Examples:
        >>> naturalize_date("20240301")
        'March 1st, 2024'
        >>> naturalize_date("2024-03-22T15:04")
        'March 22nd, 2024 at 3:04 PM'
    """
    if not value:
        return "Unknown date"

    m = _COMPACT_RE.match(value) or _ISO_RE.match(value)
    if not m:
        return value

    year, month, day = m.group(1), int(m.group(2)), int(m.group(3))
    month_name = MONTHS[month - 1] if 1 <= month <= 12 else "Unknown"
    text = f"{month_name} {ordinal(day)}, {year}"
    if m.group(4) is not None:
        text += f" at {_clock(int(m.group(4)), int(m.group(5)))}"
    return text


def og_timestamp(value: str) -> str:
    """`YYYYMMDDhhmmss…` to `YYYY-MM-DDThh:mm:ssZ`; empty when too short."""
    if len(value) < 14 or not value[:14].isdigit():
        return ""
    v = value
    return f"{v[0:4]}-{v[4:6]}-{v[6:8]}T{v[8:10]}:{v[10:12]}:{v[12:14]}Z"


def now_compact(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime("%Y%m%d%H%M%S")


def now_iso(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime("%Y-%m-%dT%H:%M:%SZ")


def generation_stamp(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
