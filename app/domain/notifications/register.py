"""
Typed view over the config register.

The register is a flat list of {id, name, value} rows. A few well-known names
are singleton keys; every other row with a non-empty value is a chat
recipient.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .schemas import ConfigEntryRecord

logger = logging.getLogger(__name__)


class ConfigKey(str, Enum):
    """Reserved register names"""

    BOT_TOKEN = "SYSTEM_TOKEN"
    SUMMARY_MARKER = "SUMMARY_STATE"
    MAIN_API_URL = "MAIN_API_URL"
    WEBHOOK_STATE = "WEBHOOK_STATE"


RESERVED_NAMES = frozenset(key.value for key in ConfigKey)


@dataclass(frozen=True)
class Recipient:
    name: str
    chat_id: str


@dataclass
class RecipientRegister:
    bot_token: Optional[str] = None
    summary_marker: Optional[str] = None
    recipients: list[Recipient] = field(default_factory=list)

    @classmethod
    def from_entries(
        cls, entries: list[ConfigEntryRecord], fallback_token: Optional[str] = None
    ) -> "RecipientRegister":
        """Split a register snapshot into singleton values and the recipient list"""
        singletons: dict[str, Optional[str]] = {}
        recipients: list[Recipient] = []

        for entry in entries:
            value = (entry.value or "").strip()
            if entry.name in RESERVED_NAMES:
                if entry.name in singletons:
                    logger.warning(f"⚠️ Duplicate register key {entry.name}; keeping the first")
                    continue
                singletons[entry.name] = value or None
            elif value:
                recipients.append(Recipient(name=entry.name, chat_id=value))

        return cls(
            bot_token=singletons.get(ConfigKey.BOT_TOKEN.value) or fallback_token,
            summary_marker=singletons.get(ConfigKey.SUMMARY_MARKER.value),
            recipients=recipients,
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.bot_token) and bool(self.recipients)
