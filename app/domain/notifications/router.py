"""Notification router - trigger, chat webhook and booking alert endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from ... import config
from ...webhook_security import require_cron_secret, verify_telegram_secret
from .repository import RecordStore, get_record_store
from .schemas import NewBooking, RunReport, TelegramUpdate
from .service import NotificationService
from .settings import NotificationSettings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notifications"])


def get_notification_service(store: RecordStore = Depends(get_record_store)) -> NotificationService:
    """Dependency injection for NotificationService"""
    return NotificationService(
        store,
        NotificationSettings.from_config(),
        fallback_token=config.TELEGRAM_BOT_TOKEN,
        fallback_chat_id=config.TELEGRAM_CHAT_ID,
    )


@router.get(
    "/cron/reminders",
    response_model=RunReport,
    dependencies=[Depends(require_cron_secret)],
)
async def run_reminders(service: NotificationService = Depends(get_notification_service)):
    """
    Recurring trigger: daily summary (when due) and 2-hour reminders.
    Requires "Authorization: Bearer <CRON_SECRET>".
    """
    try:
        return await service.run_scan()
    except Exception as e:
        logger.exception(f"❌ Notification run failed: {type(e).__name__}: {str(e)}")
        return JSONResponse(status_code=500, content={"error": "Internal error"})


@router.post("/telegram/webhook")
async def telegram_webhook(
    request: Request,
    x_telegram_bot_api_secret_token: Optional[str] = Header(None),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Inbound chat messages. Always acknowledged so Telegram does not redeliver;
    failures are logged, never returned.
    """
    try:
        if not verify_telegram_secret(x_telegram_bot_api_secret_token, config.TELEGRAM_WEBHOOK_SECRET):
            return {"ok": True}

        update = TelegramUpdate.model_validate(await request.json())
        if update.message and update.message.text:
            await service.handle_command(update.message.chat.id, update.message.text)
    except Exception as e:
        logger.error(f"❌ Telegram webhook processing error: {type(e).__name__}: {str(e)}")
        logger.exception("Full webhook error traceback:")

    return {"ok": True}


@router.post("/notifications/new-booking", dependencies=[Depends(require_cron_secret)])
async def notify_new_booking(
    booking: NewBooking, service: NotificationService = Depends(get_notification_service)
):
    """
    Booking alert called by the booking form after a client books.
    Requires "Authorization: Bearer <CRON_SECRET>". A failed delivery is
    reported in the body, never as an error status.
    """
    delivered = await service.notify_new_booking(booking)
    return {"ok": True, "delivered": delivered}
