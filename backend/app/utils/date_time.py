from calendar import monthrange
from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Current wall-clock time as a tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso_utc(dt: datetime | None) -> str | None:
    """
    Serialize a datetime to UTC ISO 8601 with trailing 'Z'.
    - If dt is None: return None.
    - If dt is naive: assume it is already UTC (DB boundary) and set tzinfo=UTC.
    - If dt has TZ: convert to UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def parse_dt(value: datetime | str) -> datetime:
    """
    Parse various datetime formats and return a tz-aware UTC datetime.
    Accepted inputs:
    - datetime (naive or tz-aware). Naive assumed UTC.
    - ISO 8601 strings, with or without 'Z' or offsets, with 'T' or space separator.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        s_norm = value.strip().replace("Z", "+00:00")
        try:
            dt = datetime.fromisoformat(s_norm)
        except ValueError:
            try:
                dt = datetime.fromisoformat(s_norm.replace(" ", "T", 1))
            except ValueError as e:
                raise ValueError(f"Unsupported datetime format: {value}") from e

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt


def to_db_utc(dt: datetime) -> datetime:
    """Naive UTC datetime for DATETIME columns (which are timezone-agnostic)."""
    return parse_dt(dt).replace(tzinfo=None)


def parse_date(value: date | datetime | str) -> date:
    """
    Parse a calendar date. Accepts date objects, datetimes (date part kept) and
    'YYYY-MM-DD' strings, optionally followed by a time part which is dropped.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = value.strip()
    try:
        return date.fromisoformat(s[:10])
    except ValueError as e:
        raise ValueError(f"Unsupported date format: {value}") from e


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=int(days))


def add_months(day: date, months: int) -> date:
    """
    Shift a date by whole calendar months. The day of month is clamped to the
    last day of the target month (Jan 31 + 1 month -> Feb 28/29).
    """
    month_index = day.month - 1 + int(months)
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))
