"""Notification service - entry points for the recurring trigger, inbound chat commands and booking alerts"""

import logging
from datetime import datetime
from typing import Callable, Optional

from ...config import TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID
from .commands import build_agenda, match_command
from .dates import business_now
from .formatting import render_new_booking
from .gateway import MessagingGateway, TelegramGateway, broadcast
from .register import RecipientRegister
from .reminders import send_due_reminders
from .repository import RecordStore, RecordStoreError
from .schemas import NewBooking, RunReport
from .settings import NotificationSettings
from .summary import run_daily_summary

logger = logging.getLogger(__name__)

GatewayFactory = Callable[[str], MessagingGateway]


class NotificationService:
    """
    Stateless per invocation: every call reads a fresh snapshot of the
    appointments and the config register, and all cross-run state lives in
    the record store (reminderSent flags, SUMMARY_STATE marker).
    """

    def __init__(
        self,
        store: RecordStore,
        settings: Optional[NotificationSettings] = None,
        gateway_factory: GatewayFactory = TelegramGateway,
        fallback_token: Optional[str] = TELEGRAM_BOT_TOKEN,
        fallback_chat_id: Optional[str] = TELEGRAM_CHAT_ID,
    ):
        self.store = store
        self.settings = settings or NotificationSettings()
        self.gateway_factory = gateway_factory
        self.fallback_token = fallback_token
        self.fallback_chat_id = fallback_chat_id

    async def load_register(self) -> RecipientRegister:
        entries = await self.store.fetch_config_entries()
        return RecipientRegister.from_entries(entries, fallback_token=self.fallback_token)

    async def run_scan(self, now_utc: Optional[datetime] = None) -> RunReport:
        """
        One scheduling run: daily summary (when due), then reminders (always).

        Args:
            now_utc: Trigger clock; defaults to the current UTC time

        Returns:
            RunReport with counts for the trigger caller
        """
        register = await self.load_register()
        report = RunReport(recipients=len(register.recipients))

        if not register.is_complete:
            logger.warning(
                f"⚠️ Notification run skipped: bot token set={bool(register.bot_token)}, "
                f"recipients={len(register.recipients)}"
            )
            report.skipped_reason = "missing_configuration"
            return report

        appointments = await self.store.fetch_all_appointments()
        now = business_now(self.settings.utc_offset_hours, now_utc)
        gateway = self.gateway_factory(register.bot_token)
        chat_ids = [recipient.chat_id for recipient in register.recipients]

        logger.info(
            f"🔄 Notification run at {now:%Y-%m-%d %H:%M} (business time): "
            f"{len(appointments)} appointments, {len(chat_ids)} recipients"
        )

        summary = await run_daily_summary(
            self.store, gateway, chat_ids, appointments, register.summary_marker, now, self.settings
        )
        reminders = await send_due_reminders(
            self.store, gateway, chat_ids, appointments, now, self.settings
        )

        report.summary_due = summary.due
        report.summary_sent = summary.sent
        report.summary_appointments = summary.appointments
        report.reminders_matched = reminders.matched
        report.reminders_sent = reminders.sent
        report.deliveries_failed = summary.deliveries_failed + reminders.deliveries_failed
        report.flag_failures = reminders.flag_failures + int(summary.marker_failed)

        logger.info(f"📊 Notification run complete: {report.model_dump()}")
        return report

    async def handle_command(
        self, chat_id: str, text: Optional[str], now_utc: Optional[datetime] = None
    ) -> bool:
        """
        Answer an inbound chat command with the requested agenda.

        Returns:
            True when a reply was delivered; False for unknown text or a failed send
        """
        scope = match_command(text)
        if scope is None:
            logger.debug(f"Ignoring non-command message from chat {chat_id}")
            return False

        register = await self.load_register()
        if not register.bot_token:
            logger.warning("⚠️ Command ignored: no bot token configured")
            return False

        appointments = await self.store.fetch_all_appointments()
        now = business_now(self.settings.utc_offset_hours, now_utc)
        message = build_agenda(scope, appointments, now, self.settings)

        gateway = self.gateway_factory(register.bot_token)
        success, _ = await gateway.send_message(chat_id, message)
        if success:
            logger.info(f"✅ Agenda '{scope.value}' sent to chat {chat_id}")
        return success

    async def notify_new_booking(
        self,
        booking: NewBooking,
        bot_token: Optional[str] = None,
        chat_id: Optional[str] = None,
    ) -> bool:
        """
        Alert the studio about a booking that was just made.

        Credentials resolve in order: explicit arguments, the config register,
        then the environment fallbacks. Failures are logged, never raised.

        Returns:
            True when at least one recipient got the alert
        """
        try:
            register = await self.load_register()
        except RecordStoreError as e:
            logger.warning(f"⚠️ Config register unavailable, using fallbacks for booking alert: {e}")
            register = RecipientRegister(bot_token=self.fallback_token)

        token = bot_token or register.bot_token
        if chat_id:
            chat_ids = [chat_id]
        else:
            chat_ids = [recipient.chat_id for recipient in register.recipients]
            if not chat_ids and self.fallback_chat_id:
                chat_ids = [self.fallback_chat_id]

        if not token or not chat_ids:
            logger.warning(
                f"⚠️ Booking alert for {booking.client_name} not sent: bot token set={bool(token)}, "
                f"recipients={len(chat_ids)}"
            )
            return False

        message = render_new_booking(booking, self.settings.business_name)
        delivered, failed = await broadcast(self.gateway_factory(token), chat_ids, message)
        if delivered:
            logger.info(f"📨 Booking alert for {booking.client_name} sent to {delivered} chat(s)")
        else:
            logger.error(f"❌ Booking alert for {booking.client_name} reached no recipient ({failed} failed)")
        return delivered > 0
