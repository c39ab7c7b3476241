"""Display formatting for dates and sizes.

All timestamps are handled as timezone-aware UTC datetimes. Naive values are
assumed to already be UTC.
"""

from datetime import date, datetime, timedelta, timezone

from common.constants import UNKNOWN_DATE


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO 8601 timestamp, returning None when it cannot be read.

    Example:
        >>> parse_timestamp("2024-03-01T12:00:00Z")
        datetime.datetime(2024, 3, 1, 12, 0, tzinfo=datetime.timezone.utc)
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _plural(count: int, unit: str) -> str:
    return f"1 {unit} ago" if count == 1 else f"{count} {unit}s ago"


def format_relative_time(value: str | datetime | None, now: datetime | None = None) -> str:
    """Human relative time such as ``now``, ``3 minutes ago`` or ``2 years ago``.

    Args:
        value: ISO timestamp or datetime
        now: Reference time (default: current UTC time)

    Returns:
        Relative label, or "Unknown" if the value cannot be parsed
    """
    moment = parse_timestamp(value)
    if moment is None:
        return UNKNOWN_DATE

    reference = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    delta = reference - moment
    seconds = int(delta.total_seconds() // 1)
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if seconds < 60:
        return "now" if seconds <= 5 else f"{seconds} seconds ago"
    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 30:
        return _plural(days, "day")
    if days < 365:
        return _plural(seconds // (30 * 86400), "month")
    return _plural(seconds // (365 * 86400), "year")


def format_file_size(size_in_bytes: int | None) -> str:
    """Format a byte count as ``B``, ``KB`` or ``MB``."""
    size = size_in_bytes or 0
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def format_repository_size(size_in_kb: int | None) -> str:
    """Format a repository size reported in KB as ``KB``, ``MB`` or ``GB``."""
    size = size_in_kb or 0
    if size < 1024:
        return f"{size} KB"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} MB"
    return f"{size / (1024 * 1024):.1f} GB"


def format_short_date(day: date) -> str:
    """``Mar 5, 2024`` style label."""
    return f"{day:%b} {day.day}, {day.year}"


def commit_date_label(value: str | datetime | None, today: date | None = None) -> str:
    """Group label for a commit: ``Today``, ``Yesterday`` or ``Mon D, YYYY``."""
    moment = parse_timestamp(value)
    if moment is None:
        return "Unknown date"

    current = today or datetime.now(timezone.utc).date()
    day = moment.date()
    if day == current:
        return "Today"
    if day == current - timedelta(days=1):
        return "Yesterday"
    return format_short_date(day)
