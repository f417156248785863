"""
Telegram Messaging Gateway
Delivers one formatted message to one chat; never raises past this boundary
"""

import logging
from typing import Optional, Protocol

import httpx

from ...config import HTTP_TIMEOUT_SECONDS, TELEGRAM_API_BASE

logger = logging.getLogger(__name__)


class MessagingGateway(Protocol):
    async def send_message(self, chat_id: str, text: str) -> tuple[bool, Optional[str]]: ...


class TelegramGateway:
    """Bot API sendMessage client bound to one bot token"""

    def __init__(
        self,
        bot_token: str,
        api_base: str = TELEGRAM_API_BASE,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        parse_mode: str = "HTML",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not bot_token:
            raise ValueError("bot_token must be provided")
        self.bot_token = bot_token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.parse_mode = parse_mode
        self.transport = transport

    @property
    def send_url(self) -> str:
        return f"{self.api_base}/bot{self.bot_token}/sendMessage"

    async def send_message(self, chat_id: str, text: str) -> tuple[bool, Optional[str]]:
        """
        Send a message via the Telegram Bot API

        Args:
            chat_id: Recipient chat identity
            text: Message body (HTML markup)

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        if not chat_id:
            logger.debug("No chat id provided")
            return False, "No chat id provided"

        payload = {"chat_id": chat_id, "text": text, "parse_mode": self.parse_mode}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.send_url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"❌ Telegram API error for chat {chat_id}: {str(e)}")
            return False, str(e)
        except Exception as e:
            logger.error(f"❌ Error sending Telegram message to {chat_id}: {str(e)}")
            return False, str(e)

        if response.status_code == 200:
            logger.info(f"📨 Telegram message delivered to chat {chat_id}")
            return True, None

        try:
            error_message = response.json().get("description", "Unknown error")
        except (ValueError, AttributeError):
            error_message = response.text[:200] or "Unknown error"
        logger.error(
            f"❌ Telegram API error [{response.status_code}] for chat {chat_id}: {error_message}"
        )
        return False, error_message


async def broadcast(gateway: MessagingGateway, chat_ids: list[str], text: str) -> tuple[int, int]:
    """
    Send the same text to every chat, one attempt each.
    A failing chat never stops delivery to the others.

    Returns:
        Tuple of (delivered, failed)
    """
    delivered = 0
    failed = 0
    for chat_id in chat_ids:
        try:
            success, error = await gateway.send_message(chat_id, text)
        except Exception as e:
            success, error = False, str(e)
            logger.error(f"❌ Gateway raised for chat {chat_id}: {error}")

        if success:
            delivered += 1
        else:
            failed += 1
            logger.warning(f"⚠️ Delivery to chat {chat_id} failed: {error}")
    return delivered, failed
