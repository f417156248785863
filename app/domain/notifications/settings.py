from dataclasses import dataclass
from datetime import timedelta

from ... import config


@dataclass(frozen=True)
class NotificationSettings:
    """Scheduling constants, passed explicitly so tests can use other values"""

    utc_offset_hours: int = -3
    summary_hour: int = 8
    lookahead: timedelta = timedelta(hours=2)
    tolerance: timedelta = timedelta(minutes=10)
    summary_mark_on_attempt: bool = False
    business_name: str = "I Lash Studio"

    @classmethod
    def from_config(cls) -> "NotificationSettings":
        return cls(
            utc_offset_hours=config.BUSINESS_UTC_OFFSET_HOURS,
            summary_hour=config.SUMMARY_HOUR,
            lookahead=timedelta(minutes=config.REMINDER_LOOKAHEAD_MINUTES),
            tolerance=timedelta(minutes=config.REMINDER_TOLERANCE_MINUTES),
            summary_mark_on_attempt=config.SUMMARY_MARK_ON_ATTEMPT,
            business_name=config.BUSINESS_NAME,
        )
