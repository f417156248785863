"""Record store adapters - appointment list, per-appointment flags and the config register"""

import asyncio
import logging
from typing import Any, Optional, Protocol

import httpx
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ...config import (
    APPOINTMENTS_API_URL,
    CONFIG_API_URL,
    HTTP_TIMEOUT_SECONDS,
    RECORD_STORE_BACKEND,
)
from .schemas import AppointmentRecord, ConfigEntryRecord

logger = logging.getLogger(__name__)

# Field names used by the REST collections the salon front end writes to
REST_APPOINTMENT_FIELDS = {"reminder_sent": "reminderSent", "confirmed": "confirmado"}
REST_CONFIG_NAME_FIELD = "nome"
REST_CONFIG_VALUE_FIELD = "chatID"


class RecordStoreError(Exception):
    """Raised when the record store cannot be read or written"""

    pass


class RecordStore(Protocol):
    async def fetch_all_appointments(self) -> list[AppointmentRecord]: ...

    async def fetch_config_entries(self) -> list[ConfigEntryRecord]: ...

    async def patch_appointment(self, appointment_id: str, fields: dict[str, Any]) -> None: ...

    async def upsert_config_entry(self, name: str, value: str) -> None: ...


def _parse_rows(rows: list, model, label: str) -> list:
    records = []
    for row in rows:
        try:
            records.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(f"⚠️ Skipping malformed {label} row: {e.error_count()} error(s)")
    return records


class RestRecordStore:
    """Record store backed by mockapi-style JSON collections"""

    def __init__(
        self,
        appointments_url: str = APPOINTMENTS_API_URL,
        config_url: str = CONFIG_API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.appointments_url = appointments_url.rstrip("/")
        self.config_url = config_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"❌ Record store request failed: {method} {url}: {e}")
            raise RecordStoreError(f"{method} {url} failed: {e}") from e

        if response.status_code not in (200, 201):
            logger.error(
                f"❌ Record store error response: {method} {url} "
                f"status={response.status_code} body={response.text[:500]}"
            )
            raise RecordStoreError(f"{method} {url} returned {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise RecordStoreError(f"{method} {url} returned invalid JSON") from e

    async def _get_list(self, url: str) -> list:
        payload = await self._request("GET", url)
        if not isinstance(payload, list):
            raise RecordStoreError(f"GET {url} did not return a list")
        return payload

    async def fetch_all_appointments(self) -> list[AppointmentRecord]:
        rows = await self._get_list(self.appointments_url)
        return _parse_rows(rows, AppointmentRecord, "appointment")

    async def fetch_config_entries(self) -> list[ConfigEntryRecord]:
        rows = await self._get_list(self.config_url)
        return _parse_rows(rows, ConfigEntryRecord, "config")

    async def patch_appointment(self, appointment_id: str, fields: dict[str, Any]) -> None:
        body = {REST_APPOINTMENT_FIELDS.get(key, key): value for key, value in fields.items()}
        await self._request("PUT", f"{self.appointments_url}/{appointment_id}", json=body)

    async def upsert_config_entry(self, name: str, value: str) -> None:
        body = {REST_CONFIG_NAME_FIELD: name, REST_CONFIG_VALUE_FIELD: value}
        existing = next(
            (entry for entry in await self.fetch_config_entries() if entry.name == name), None
        )
        if existing and existing.id:
            await self._request("PUT", f"{self.config_url}/{existing.id}", json=body)
        else:
            await self._request("POST", self.config_url, json=body)


class SqlRecordStore:
    """
    Record store backed by the SQLAlchemy tables in app.models.
    Session work runs in a worker thread via asyncio.to_thread.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        if session_factory is None:
            from ...database import SessionLocal

            session_factory = SessionLocal
        self.session_factory = session_factory

    @staticmethod
    def _to_record(row) -> AppointmentRecord:
        return AppointmentRecord(
            id=row.id,
            when=row.when,
            confirmed=row.confirmed,
            reminder_sent=row.reminder_sent,
            client_name=row.client_name,
            service=row.service,
            category=row.category,
            price=row.price,
            whatsapp=row.whatsapp,
            notes=row.notes,
        )

    async def fetch_all_appointments(self) -> list[AppointmentRecord]:
        return await asyncio.to_thread(self._fetch_all_appointments)

    async def fetch_config_entries(self) -> list[ConfigEntryRecord]:
        return await asyncio.to_thread(self._fetch_config_entries)

    async def patch_appointment(self, appointment_id: str, fields: dict[str, Any]) -> None:
        await asyncio.to_thread(self._patch_appointment, appointment_id, fields)

    async def upsert_config_entry(self, name: str, value: str) -> None:
        await asyncio.to_thread(self._upsert_config_entry, name, value)

    def _fetch_all_appointments(self) -> list[AppointmentRecord]:
        from ...models import Appointment

        db: Session = self.session_factory()
        try:
            return [self._to_record(row) for row in db.query(Appointment).all()]
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load appointments: {e}")
            raise RecordStoreError("Failed to load appointments") from e
        finally:
            db.close()

    def _fetch_config_entries(self) -> list[ConfigEntryRecord]:
        from ...models import ConfigEntry

        db: Session = self.session_factory()
        try:
            rows = db.query(ConfigEntry).order_by(ConfigEntry.created_at.asc()).all()
            return [ConfigEntryRecord(id=row.id, name=row.name, value=row.value) for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load config register: {e}")
            raise RecordStoreError("Failed to load config register") from e
        finally:
            db.close()

    def _patch_appointment(self, appointment_id: str, fields: dict[str, Any]) -> None:
        from ...models import Appointment

        db: Session = self.session_factory()
        try:
            appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
            if not appointment:
                raise RecordStoreError(f"Appointment not found: {appointment_id}")
            for key, value in fields.items():
                if hasattr(appointment, key):
                    setattr(appointment, key, value)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Failed to update appointment {appointment_id}: {e}")
            raise RecordStoreError(f"Failed to update appointment {appointment_id}") from e
        finally:
            db.close()

    def _upsert_config_entry(self, name: str, value: str) -> None:
        from ...models import ConfigEntry

        db: Session = self.session_factory()
        try:
            entry = db.query(ConfigEntry).filter(ConfigEntry.name == name).first()
            if entry:
                entry.value = value
            else:
                db.add(ConfigEntry(name=name, value=value))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Failed to write config entry {name}: {e}")
            raise RecordStoreError(f"Failed to write config entry {name}") from e
        finally:
            db.close()


def get_record_store() -> RecordStore:
    """Dependency injection for the configured record store backend"""
    if RECORD_STORE_BACKEND == "database":
        return SqlRecordStore()
    return RestRecordStore()
