"""
Reminder window matching.

A reminder is due when an eligible appointment starts inside
[now + lookahead - tolerance, now + lookahead + tolerance], both ends
inclusive. The window slides with every trigger, so a reminder whose
deliveries all failed is retried while it stays inside the window and is
dropped once the window has passed it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from .dates import parse_appointment_time
from .formatting import ScheduledItem, render_reminder
from .gateway import MessagingGateway, broadcast
from .repository import RecordStore, RecordStoreError
from .schemas import AppointmentRecord
from .settings import NotificationSettings

logger = logging.getLogger(__name__)


@dataclass
class ReminderOutcome:
    matched: int = 0
    sent: int = 0
    deliveries_failed: int = 0
    flag_failures: int = 0


def is_reminder_eligible(appointment: AppointmentRecord) -> bool:
    """Not explicitly unconfirmed and not reminded yet (the date check happens on parse)"""
    return appointment.confirmed is not False and not appointment.reminder_sent


def eligible_appointments(
    appointments: list[AppointmentRecord], utc_offset_hours: int
) -> list[ScheduledItem]:
    """Eligible appointments with a valid time, paired with that time, sorted ascending"""
    items: list[ScheduledItem] = []
    for appointment in appointments:
        if not is_reminder_eligible(appointment):
            continue
        when = parse_appointment_time(appointment.when, utc_offset_hours)
        if when is None:
            continue
        items.append((appointment, when))
    return sorted(items, key=lambda item: item[1])


def reminder_window(now: datetime, settings: NotificationSettings) -> tuple[datetime, datetime]:
    target = now + settings.lookahead
    return target - settings.tolerance, target + settings.tolerance


def select_due_reminders(
    appointments: list[AppointmentRecord], now: datetime, settings: NotificationSettings
) -> list[ScheduledItem]:
    """
    Appointments due for a reminder at business time `now`

    Args:
        appointments: Full appointment snapshot
        now: Business wall-clock time (already shifted from UTC)
        settings: Lookahead, tolerance and offset

    Returns:
        (appointment, start time) pairs inside the window
    """
    start, end = reminder_window(now, settings)
    return [
        (appointment, when)
        for appointment, when in eligible_appointments(appointments, settings.utc_offset_hours)
        if start <= when <= end
    ]


async def send_due_reminders(
    store: RecordStore,
    gateway: MessagingGateway,
    chat_ids: list[str],
    appointments: list[AppointmentRecord],
    now: datetime,
    settings: NotificationSettings,
) -> ReminderOutcome:
    """Deliver one reminder per due appointment and persist reminderSent after each success"""
    outcome = ReminderOutcome()
    due = select_due_reminders(appointments, now, settings)
    outcome.matched = len(due)

    for appointment, when in due:
        message = render_reminder(appointment, when, settings.business_name)
        delivered, failed = await broadcast(gateway, chat_ids, message)
        outcome.deliveries_failed += failed

        if not delivered:
            logger.warning(
                f"⚠️ Reminder for appointment {appointment.id} reached no recipient; "
                f"will retry while it stays in the window"
            )
            continue

        # One write per appointment, never batched
        try:
            await store.patch_appointment(appointment.id, {"reminder_sent": True})
        except RecordStoreError as e:
            outcome.flag_failures += 1
            logger.error(f"❌ Reminder sent but flag not saved for appointment {appointment.id}: {e}")
            continue

        outcome.sent += 1
        logger.info(f"✅ Reminder sent for appointment {appointment.id} at {when:%H:%M}")

    return outcome
