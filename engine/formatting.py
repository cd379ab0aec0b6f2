import re
from datetime import datetime

UNKNOWN = "Unknown"

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_HMS_RE = re.compile(r"^(\d+):(\d{2}):(\d{2})$")
_MS_RE = re.compile(r"^(\d+):(\d{2})$")
_DATE_RE = re.compile(r"^\d{8}$")


def _is_unknown(value):
    return value is None or str(value).strip() in {"", UNKNOWN}


def ordinal_suffix(day):
    day = int(day)
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def weekday_name(when):
    return _WEEKDAYS[when.weekday()]


def month_name(when):
    return _MONTHS[when.month - 1]


def format_duration(duration):
    """'1:02:03' -> '1h 02m 03s', '4:05' -> '4m 05s'; other text passes through."""
    if _is_unknown(duration):
        return UNKNOWN
    duration = str(duration).strip()
    match = _HMS_RE.match(duration)
    if match:
        hours, minutes, seconds = match.groups()
        return f"{hours}h {minutes}m {seconds}s"
    match = _MS_RE.match(duration)
    if match:
        minutes, seconds = match.groups()
        return f"{minutes}m {seconds}s"
    return duration


def seconds_to_clock(seconds):
    """Render a duration in seconds the way yt-dlp prints it: H:MM:SS or M:SS."""
    if seconds is None:
        return None
    try:
        total = int(round(float(seconds)))
    except (TypeError, ValueError):
        return None
    if total < 0:
        return None
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_number(number):
    if _is_unknown(number):
        return UNKNOWN
    text = str(number).strip()
    if not text.isdigit() or not text.isascii():
        return UNKNOWN
    return f"{int(text):,}"


def format_date(date_str):
    """'20250115' -> 'Wed, 15th Jan 2025'."""
    if _is_unknown(date_str):
        return UNKNOWN
    text = str(date_str).strip()
    if not _DATE_RE.match(text):
        return UNKNOWN
    try:
        when = datetime.strptime(text, "%Y%m%d")
    except ValueError:
        return UNKNOWN
    return f"{weekday_name(when)}, {when.day}{ordinal_suffix(when.day)} {month_name(when)} {when.year}"


def format_size(num_bytes):
    """Human readable size in the style of `du -h`."""
    if num_bytes is None:
        return "N/A"
    size = float(num_bytes)
    if size < 1024:
        return f"{int(size)}B"
    for unit in ("K", "M", "G"):
        size /= 1024
        if size < 1024:
            return f"{size:.1f}{unit}"
    return f"{size / 1024:.1f}T"


def value_or_unknown(value):
    if _is_unknown(value):
        return UNKNOWN
    return str(value)
