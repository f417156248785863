"""
Webhook Security Module

Shared-secret checks for the inbound endpoints:
- Bearer secret on the recurring trigger (rejected before any data access)
- Optional Telegram secret-token header on the chat webhook
Both comparisons run in constant time.
"""

import hmac
import logging
from typing import Optional

from fastapi import Header, HTTPException

from . import config

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    """Constant-time string equality; empty or missing values never match"""
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def verify_bearer_secret(authorization: Optional[str], secret: Optional[str]) -> None:
    """
    Check an Authorization header against the configured shared secret

    Raises:
        HTTPException: 500 when no secret is configured, 401 on a missing or wrong credential
    """
    if not secret:
        logger.error("❌ CRON_SECRET not configured - refusing to run")
        raise HTTPException(status_code=500, detail="CRON_SECRET not configured")

    if not authorization or not authorization.startswith(BEARER_PREFIX):
        logger.warning("🚫 Trigger called without a bearer credential")
        raise HTTPException(status_code=401, detail="Unauthorized")

    if not constant_time_compare(authorization[len(BEARER_PREFIX) :], secret):
        logger.warning("🚫 Trigger called with an invalid bearer credential")
        raise HTTPException(status_code=401, detail="Unauthorized")


async def require_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """FastAPI dependency guarding the trigger endpoint"""
    verify_bearer_secret(authorization, config.CRON_SECRET)


def verify_telegram_secret(header_value: Optional[str], secret: Optional[str]) -> bool:
    """
    Verify X-Telegram-Bot-Api-Secret-Token. Without a configured secret the
    check is skipped, as Telegram only sends the header when one was registered.
    """
    if not secret:
        return True
    if constant_time_compare(header_value, secret):
        return True
    logger.warning("🚫 Telegram webhook secret token mismatch")
    return False
