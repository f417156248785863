"""
Record Store Models
Database models for the relational record-store backend
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.sql import func

from .database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Appointment(Base):
    """One scheduled service visit"""

    __tablename__ = "appointments"

    id = Column(String(64), primary_key=True, default=_new_id)

    # ISO ("2024-06-10T08:00") or locale ("10/06/2024 08:00") string, stored as entered
    when = Column(String(40), nullable=False)

    # NULL is treated as confirmed; False excludes the visit from every notification
    confirmed = Column(Boolean, nullable=True)
    reminder_sent = Column(Boolean, nullable=False, default=False)

    # Display fields
    client_name = Column(String(255), nullable=True)
    service = Column(String(255), nullable=True)
    category = Column(String(100), nullable=True)
    price = Column(String(50), nullable=True)
    whatsapp = Column(String(30), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ConfigEntry(Base):
    """Key/value register row - well-known names are singletons, the rest are chat recipients"""

    __tablename__ = "config_entries"

    id = Column(String(64), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False, index=True)
    value = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
