import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Union

DateLike = Union[date, datetime]

START_OF_DAY_FORMAT = "%Y-%m-%d 00:00:00"
END_OF_DAY_FORMAT = "%Y-%m-%d 23:59:59"


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching the stored columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(value: DateLike) -> DateLike:
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def start_of_day(value: DateLike) -> datetime:
    value = _as_naive_utc(value)
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time.min)


def end_of_day(value: DateLike) -> datetime:
    """Last whole second of the day, ``23:59:59``."""
    value = _as_naive_utc(value)
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time(23, 59, 59))


def minus_months(value: datetime, months: int) -> datetime:
    """Subtract calendar months, clamping the day to the target month's length."""
    month_index = value.year * 12 + value.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def minus_period(value: datetime, amount: int, unit: str) -> datetime:
    """
    Subtract ``amount`` days, weeks or months from ``value``.

    Unknown units are treated as days.
    """
    if unit == "week":
        return value - timedelta(weeks=amount)
    if unit == "month":
        return minus_months(value, amount)
    return value - timedelta(days=amount)


def format_start_of_day(value: DateLike) -> str:
    return start_of_day(value).strftime(START_OF_DAY_FORMAT)


def format_end_of_day(value: DateLike) -> str:
    return end_of_day(value).strftime(END_OF_DAY_FORMAT)
