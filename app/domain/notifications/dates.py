"""
Date normalization for appointment timestamps.

The record store holds appointment times in one of two shapes:

- ISO date-time, e.g. ``2024-06-10T08:00`` (optionally with seconds and a
  ``Z``/``+HH:MM`` suffix), written by the booking form
- locale display form ``dd/MM/yyyy HH:mm``, e.g. ``10/06/2024 08:00``,
  written by manual edits

The ``T`` separator decides which parser runs. Everything downstream works
on the naive business wall-clock ``datetime`` returned here and never looks
at the raw string again.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from dateutil.relativedelta import SU, relativedelta

logger = logging.getLogger(__name__)

ISO_DATE_TIME_SEPARATOR = "T"
LOCALE_FORMAT = "%d/%m/%Y %H:%M"
DAY_KEY_FORMAT = "%Y-%m-%d"


def business_timezone(offset_hours: int) -> timezone:
    """Fixed-offset zone of the business (no DST lookup)"""
    return timezone(timedelta(hours=offset_hours))


def business_now(offset_hours: int, now_utc: Optional[datetime] = None) -> datetime:
    """
    Shift the UTC trigger clock to business wall-clock time.

    Args:
        offset_hours: Business offset from UTC (e.g. -3)
        now_utc: Current instant; naive values are read as UTC

    Returns:
        Naive datetime in business local time
    """
    if now_utc is None:
        now_utc = datetime.now(timezone.utc)
    elif now_utc.tzinfo is None:
        now_utc = now_utc.replace(tzinfo=timezone.utc)

    return now_utc.astimezone(business_timezone(offset_hours)).replace(tzinfo=None)


def _parse_iso(value: str, offset_hours: int) -> Optional[datetime]:
    if value[-1] in "Zz":
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(business_timezone(offset_hours)).replace(tzinfo=None)
    return parsed


def parse_appointment_time(raw: Optional[str], offset_hours: int) -> Optional[datetime]:
    """
    Normalize a stored appointment time to business wall-clock time.

    Returns None for anything that cannot be parsed or is not a real calendar
    date; callers exclude such records instead of failing.
    """
    if not isinstance(raw, str):
        return None
    value = raw.strip()
    if not value:
        return None

    if ISO_DATE_TIME_SEPARATOR in value:
        parsed = _parse_iso(value, offset_hours)
    else:
        try:
            parsed = datetime.strptime(value, LOCALE_FORMAT)
        except ValueError:
            parsed = None

    if parsed is None:
        logger.debug(f"Unparsable appointment time: {raw!r}")
    return parsed


def day_key(moment: datetime) -> str:
    """Date string stored as the summary marker"""
    return moment.strftime(DAY_KEY_FORMAT)


def is_same_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()


def is_same_month(a: datetime, b: datetime) -> bool:
    return (a.year, a.month) == (b.year, b.month)


def week_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """Sunday 00:00 through Saturday 23:59:59.999999 of the week containing moment"""
    start = moment + relativedelta(weekday=SU(-1), hour=0, minute=0, second=0, microsecond=0)
    end = start + relativedelta(days=+7, microseconds=-1)
    return start, end


def first_of_next_month(moment: datetime) -> datetime:
    return moment + relativedelta(months=1, day=1)
