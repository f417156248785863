"""
Chat command matching and agenda building.

Read-only: nothing here writes to the record store.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from .dates import first_of_next_month, is_same_day, is_same_month, week_bounds
from .formatting import (
    render_month_agenda,
    render_next_month_agenda,
    render_today_agenda,
    render_week_agenda,
)
from .reminders import eligible_appointments
from .schemas import AppointmentRecord
from .settings import NotificationSettings

logger = logging.getLogger(__name__)


class AgendaScope(str, Enum):
    TODAY = "today"
    THIS_MONTH = "this_month"
    THIS_WEEK = "this_week"
    NEXT_MONTH = "next_month"


# Checked in order, as case-insensitive prefixes of the inbound text
COMMAND_TOKENS: tuple[tuple[str, AgendaScope], ...] = (
    ("/command1", AgendaScope.TODAY),
    ("/today", AgendaScope.TODAY),
    ("/hoje", AgendaScope.TODAY),
    ("/start", AgendaScope.TODAY),
    ("today", AgendaScope.TODAY),
    ("hoje", AgendaScope.TODAY),
    ("/command2", AgendaScope.THIS_MONTH),
    ("/month", AgendaScope.THIS_MONTH),
    ("/mes", AgendaScope.THIS_MONTH),
    ("this month", AgendaScope.THIS_MONTH),
    ("/command3", AgendaScope.THIS_WEEK),
    ("/week", AgendaScope.THIS_WEEK),
    ("/semana", AgendaScope.THIS_WEEK),
    ("this week", AgendaScope.THIS_WEEK),
    ("/command4", AgendaScope.NEXT_MONTH),
    ("/nextmonth", AgendaScope.NEXT_MONTH),
    ("/proximo", AgendaScope.NEXT_MONTH),
    ("next month", AgendaScope.NEXT_MONTH),
)


def match_command(text: Optional[str]) -> Optional[AgendaScope]:
    """Scope for a recognised command, None for any other text"""
    if not text:
        return None
    normalized = text.strip().lower()
    for token, scope in COMMAND_TOKENS:
        if normalized.startswith(token):
            return scope
    return None


def build_agenda(
    scope: AgendaScope,
    appointments: list[AppointmentRecord],
    now: datetime,
    settings: NotificationSettings,
) -> str:
    items = eligible_appointments(appointments, settings.utc_offset_hours)

    if scope is AgendaScope.TODAY:
        return render_today_agenda([item for item in items if is_same_day(item[1], now)], now)

    if scope is AgendaScope.THIS_MONTH:
        return render_month_agenda([item for item in items if is_same_month(item[1], now)], now)

    if scope is AgendaScope.THIS_WEEK:
        start, end = week_bounds(now)
        return render_week_agenda([item for item in items if start <= item[1] <= end])

    next_month = first_of_next_month(now)
    return render_next_month_agenda(
        [item for item in items if is_same_month(item[1], next_month)], next_month
    )
