from datetime import date, datetime, timedelta, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def iter_days(start: date, end: date | None = None):
    """Yield each calendar day in [start, end]; a missing end means a single day."""
    last = end or start
    d = start
    while d <= last:
        yield d
        d += timedelta(days=1)


def format_event_date(day: date) -> str:
    return day.strftime("%A, %B %d, %Y").replace(" 0", " ")


def format_deadline(moment: datetime) -> str:
    return moment.strftime("%B %d, %Y at %I:%M %p UTC").replace(" 0", " ")
