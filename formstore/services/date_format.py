# formstore/services/date_format.py
"""
PHP date() style format strings.

Date fields submitted by the form layer are stored as
{"date": "15.01.2024", "dateFormat": "d.m.Y", "timezone": "Europe/Berlin"}
and the listing/export output format is configured the same way
(DATETIME_FORMAT = "Y-m-d H:i:s"). This module parses and renders those
formats on top of datetime.strptime/strftime.
"""

import calendar
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class DateFormatError(ValueError):
    """Raised when a value does not match its format or the format cannot be parsed."""


def _ordinal_suffix(day: int) -> str:
    if 10 <= day % 100 <= 20:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _utc_offset(dt: datetime, colon: bool) -> str:
    offset = dt.utcoffset()
    if offset is None:
        return "+00:00" if colon else "+0000"
    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{sign}{hours:02d}:{minutes:02d}" if colon else f"{sign}{hours:02d}{minutes:02d}"


def _timezone_name(dt: datetime) -> str:
    tz = dt.tzinfo
    if tz is None:
        return "UTC"
    return getattr(tz, "key", None) or dt.tzname() or "UTC"


def _hour12(dt: datetime) -> int:
    return dt.hour % 12 or 12


# format character -> renderer
_RENDERERS = {
    # Day
    "d": lambda dt: f"{dt.day:02d}",
    "D": lambda dt: dt.strftime("%a"),
    "j": lambda dt: str(dt.day),
    "l": lambda dt: dt.strftime("%A"),
    "N": lambda dt: str(dt.isoweekday()),
    "S": lambda dt: _ordinal_suffix(dt.day),
    "w": lambda dt: str(dt.isoweekday() % 7),
    "z": lambda dt: str(dt.timetuple().tm_yday - 1),
    # Week / month / year
    "W": lambda dt: f"{dt.isocalendar()[1]:02d}",
    "F": lambda dt: dt.strftime("%B"),
    "m": lambda dt: f"{dt.month:02d}",
    "M": lambda dt: dt.strftime("%b"),
    "n": lambda dt: str(dt.month),
    "t": lambda dt: str(calendar.monthrange(dt.year, dt.month)[1]),
    "L": lambda dt: "1" if calendar.isleap(dt.year) else "0",
    "o": lambda dt: str(dt.isocalendar()[0]),
    "Y": lambda dt: f"{dt.year:04d}",
    "y": lambda dt: f"{dt.year % 100:02d}",
    # Time
    "a": lambda dt: "am" if dt.hour < 12 else "pm",
    "A": lambda dt: "AM" if dt.hour < 12 else "PM",
    "g": lambda dt: str(_hour12(dt)),
    "G": lambda dt: str(dt.hour),
    "h": lambda dt: f"{_hour12(dt):02d}",
    "H": lambda dt: f"{dt.hour:02d}",
    "i": lambda dt: f"{dt.minute:02d}",
    "s": lambda dt: f"{dt.second:02d}",
    "u": lambda dt: f"{dt.microsecond:06d}",
    "v": lambda dt: f"{dt.microsecond // 1000:03d}",
    # Timezone
    "e": _timezone_name,
    "T": lambda dt: dt.tzname() or "UTC",
    "O": lambda dt: _utc_offset(dt, colon=False),
    "P": lambda dt: _utc_offset(dt, colon=True),
    "p": lambda dt: "Z" if not dt.utcoffset() else _utc_offset(dt, colon=True),
    # Full date/time
    "c": lambda dt: format_datetime(dt, "Y-m-d\\TH:i:sP"),
    "r": lambda dt: format_datetime(dt, "D, d M Y H:i:s O"),
    "U": lambda dt: str(int(dt.timestamp())),
}

# format character -> strptime directive
_PARSE_DIRECTIVES = {
    "d": "%d",
    "j": "%d",
    "D": "%a",
    "l": "%A",
    "F": "%B",
    "M": "%b",
    "m": "%m",
    "n": "%m",
    "Y": "%Y",
    "y": "%y",
    "a": "%p",
    "A": "%p",
    "g": "%I",
    "h": "%I",
    "G": "%H",
    "H": "%H",
    "i": "%M",
    "s": "%S",
    "u": "%f",
    "O": "%z",
    "P": "%z",
    "p": "%z",
    "T": "%Z",
}

# Parse-only modifiers that only reset unparsed fields in PHP; unparsed fields default to zero here anyway
_PARSE_NOOPS = {"!", "|", "+"}


def _tokenize(fmt: str) -> list[tuple[bool, str]]:
    """Split a format into (is_format_char, char) pairs, honouring backslash escapes."""
    tokens = []
    escaped = False
    for char in fmt:
        if escaped:
            tokens.append((False, char))
            escaped = False
        elif char == "\\":
            escaped = True
        else:
            tokens.append((char in _RENDERERS or char in _PARSE_NOOPS, char))
    return tokens


def format_datetime(dt: datetime, fmt: str) -> str:
    """Render dt with a PHP date() format."""
    parts = []
    for is_format, char in _tokenize(fmt):
        if is_format and char in _RENDERERS:
            parts.append(_RENDERERS[char](dt))
        else:
            parts.append(char)
    return "".join(parts)


def to_strptime(fmt: str) -> str:
    """Translate a PHP date format into a strptime pattern."""
    pattern = []
    for is_format, char in _tokenize(fmt):
        if not is_format:
            pattern.append("%%" if char == "%" else char)
        elif char in _PARSE_NOOPS:
            continue
        elif char in _PARSE_DIRECTIVES:
            pattern.append(_PARSE_DIRECTIVES[char])
        else:
            raise DateFormatError(f"Format character '{char}' cannot be used for parsing")
    return "".join(pattern)


def get_timezone(name: str | None):
    """ZoneInfo for name, None for empty names."""
    if not name:
        return None
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise DateFormatError(f"Unknown timezone '{name}'") from e


def parse_datetime(value: str, fmt: str, timezone: str | None = None) -> datetime:
    """
    Parse value with a PHP date() format.

    A timezone only applies when the value itself carries no offset.
    """
    tz = get_timezone(timezone)

    if fmt.strip("!|") == "U":
        try:
            parsed = datetime.fromtimestamp(int(value), UTC)
        except (TypeError, ValueError, OverflowError) as e:
            raise DateFormatError(f"'{value}' is not a unix timestamp") from e
        return parsed.astimezone(tz) if tz else parsed

    try:
        parsed = datetime.strptime(str(value), to_strptime(fmt))
    except ValueError as e:
        if isinstance(e, DateFormatError):
            raise
        raise DateFormatError(f"'{value}' does not match format '{fmt}'") from e

    if parsed.tzinfo is None and tz is not None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed
