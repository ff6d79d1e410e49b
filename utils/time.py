from collections.abc import Iterator
from datetime import UTC, date, datetime, timedelta


def utc_today() -> date:
    """Returns the current UTC date."""
    return datetime.now(UTC).date()


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    """Returns the last day of the month containing ``day``."""
    return add_months(start_of_month(day), 1) - timedelta(days=1)


def add_months(day: date, months: int) -> date:
    """Shifts a first-of-month date by a number of calendar months."""
    month_index = day.year * 12 + (day.month - 1) + months
    return date(month_index // 12, month_index % 12 + 1, 1)


def month_range(day: date) -> tuple[date, date]:
    return start_of_month(day), end_of_month(day)


def previous_month_range(day: date) -> tuple[date, date]:
    start = start_of_month(day)
    return add_months(start, -1), start - timedelta(days=1)


def iter_month_chunks(start: date, end: date) -> Iterator[tuple[date, date]]:
    """Splits an inclusive date range at calendar month boundaries."""
    if end < start:
        raise ValueError("end must be later than or equal to start")

    chunk_start = start
    while chunk_start <= end:
        chunk_end = min(end_of_month(chunk_start), end)
        yield chunk_start, chunk_end
        chunk_start = chunk_end + timedelta(days=1)
