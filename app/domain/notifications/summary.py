"""
Daily summary (digest) scheduling.

Two logical states per business day, derived from the SUMMARY_STATE marker:
PENDING while the marker holds another date, SENT once it holds today's.
The digest goes out on the first trigger inside the configured hour while
PENDING; every later trigger that day is a no-op.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .dates import day_key, is_same_day
from .formatting import ScheduledItem, render_daily_summary
from .gateway import MessagingGateway, broadcast
from .register import ConfigKey
from .reminders import eligible_appointments
from .repository import RecordStore, RecordStoreError
from .schemas import AppointmentRecord
from .settings import NotificationSettings

logger = logging.getLogger(__name__)


class SummaryState(str, Enum):
    PENDING = "pending"
    SENT = "sent"


@dataclass
class SummaryOutcome:
    due: bool = False
    sent: bool = False
    marker_written: bool = False
    marker_failed: bool = False
    appointments: int = 0
    deliveries_failed: int = 0


def summary_state(marker: Optional[str], now: datetime) -> SummaryState:
    return SummaryState.SENT if marker == day_key(now) else SummaryState.PENDING


def is_summary_due(marker: Optional[str], now: datetime, settings: NotificationSettings) -> bool:
    return now.hour == settings.summary_hour and summary_state(marker, now) is SummaryState.PENDING


def todays_appointments(
    appointments: list[AppointmentRecord], now: datetime, settings: NotificationSettings
) -> list[ScheduledItem]:
    return [
        (appointment, when)
        for appointment, when in eligible_appointments(appointments, settings.utc_offset_hours)
        if is_same_day(when, now)
    ]


async def mark_summary_sent(store: RecordStore, now: datetime) -> None:
    await store.upsert_config_entry(ConfigKey.SUMMARY_MARKER.value, day_key(now))


async def run_daily_summary(
    store: RecordStore,
    gateway: MessagingGateway,
    chat_ids: list[str],
    appointments: list[AppointmentRecord],
    marker: Optional[str],
    now: datetime,
    settings: NotificationSettings,
) -> SummaryOutcome:
    """
    Send today's digest if it is due.

    The marker is written after the deliveries. By default that needs at
    least one successful delivery; with summary_mark_on_attempt the attempt
    alone is enough.
    """
    if not is_summary_due(marker, now, settings):
        return SummaryOutcome()

    items = todays_appointments(appointments, now, settings)
    outcome = SummaryOutcome(due=True, appointments=len(items))
    logger.info(f"📋 Sending daily summary for {day_key(now)} ({len(items)} appointments)")

    delivered, failed = await broadcast(gateway, chat_ids, render_daily_summary(items))
    outcome.deliveries_failed = failed
    outcome.sent = delivered > 0

    if not delivered and not settings.summary_mark_on_attempt:
        logger.warning("⚠️ Daily summary reached no recipient; will retry on the next trigger")
        return outcome

    try:
        await mark_summary_sent(store, now)
        outcome.marker_written = True
    except RecordStoreError as e:
        outcome.marker_failed = True
        logger.error(f"❌ Daily summary marker not saved: {e}")

    return outcome
