from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models
from app.database import Base
from app.domain.notifications.repository import SqlRecordStore
from app.domain.notifications.settings import NotificationSettings


class FakeGateway:
    """Records deliveries; chats listed in `failing` always fail"""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent: list[tuple[str, str]] = []
        self.attempts: list[str] = []

    async def send_message(self, chat_id, text):
        self.attempts.append(chat_id)
        if chat_id in self.failing:
            return False, "Bad Request: chat not found"
        self.sent.append((chat_id, text))
        return True, None


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return SqlRecordStore(session_factory)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def settings():
    return NotificationSettings()


@pytest.fixture
def add_appointment(session_factory):
    def _add(appointment_id, when, **fields):
        db = session_factory()
        try:
            db.add(models.Appointment(id=appointment_id, when=when, **fields))
            db.commit()
        finally:
            db.close()

    return _add


@pytest.fixture
def add_config(session_factory):
    def _add(name, value):
        db = session_factory()
        try:
            db.add(models.ConfigEntry(name=name, value=value))
            db.commit()
        finally:
            db.close()

    return _add


@pytest.fixture
def load_appointment(session_factory):
    def _load(appointment_id):
        db = session_factory()
        try:
            return db.query(models.Appointment).filter(models.Appointment.id == appointment_id).one()
        finally:
            db.close()

    return _load


@pytest.fixture
def configured(add_config):
    """Bot token plus two recipients"""
    add_config("SYSTEM_TOKEN", "123:abc")
    add_config("Studio", "111")
    add_config("Owner", "222")
