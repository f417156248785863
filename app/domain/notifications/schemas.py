"""Notification domain schemas - Pydantic models for records, reports and inbound updates"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _as_text(v):
    if v is None:
        return v
    return str(v)


class AppointmentRecord(BaseModel):
    """
    Appointment snapshot as read from the record store.

    Accepts both this service's field names and the ones the
    salon store writes (data, confirmado, nome, servico, tipo, valor).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    when: str = Field(default="", validation_alias=AliasChoices("when", "data"))
    confirmed: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("confirmed", "confirmado")
    )
    reminder_sent: bool = Field(
        default=False, validation_alias=AliasChoices("reminder_sent", "reminderSent")
    )
    client_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("client_name", "clientName", "nome")
    )
    service: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("service", "servico")
    )
    category: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("category", "tipo")
    )
    price: Optional[str] = Field(default=None, validation_alias=AliasChoices("price", "valor"))
    whatsapp: Optional[str] = None
    notes: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("notes", "observacoes")
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _as_text(v)

    @field_validator("when", mode="before")
    @classmethod
    def coerce_when(cls, v):
        return "" if v is None else str(v)

    @field_validator("reminder_sent", mode="before")
    @classmethod
    def coerce_reminder_sent(cls, v):
        return False if v is None or v == "" else v

    @field_validator("price", "whatsapp", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)


class ConfigEntryRecord(BaseModel):
    """One {id, name, value} row of the config register"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    name: str = Field(validation_alias=AliasChoices("name", "nome"))
    value: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("value", "chatID", "chat_id")
    )

    @field_validator("id", "value", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)


class RunReport(BaseModel):
    """Outcome of one scheduling run, returned to the trigger caller"""

    success: bool = True
    skipped_reason: Optional[str] = None
    recipients: int = 0
    summary_due: bool = False
    summary_sent: bool = False
    summary_appointments: int = 0
    reminders_matched: int = 0
    reminders_sent: int = 0
    deliveries_failed: int = 0
    flag_failures: int = 0


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _as_text(v)


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    chat: TelegramChat
    text: Optional[str] = None


class TelegramUpdate(BaseModel):
    """Inbound webhook payload - only the fields the command responder reads"""

    model_config = ConfigDict(extra="ignore")

    update_id: Optional[int] = None
    message: Optional[TelegramMessage] = None


class NewBooking(BaseModel):
    """Booking details posted by the booking form right after a client books"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    client_name: str = Field(validation_alias=AliasChoices("client_name", "clientName", "nome"))
    whatsapp: Optional[str] = None
    service: Optional[str] = Field(default=None, validation_alias=AliasChoices("service", "servico"))
    date: str = Field(validation_alias=AliasChoices("date", "data"))
    time: Optional[str] = Field(default=None, validation_alias=AliasChoices("time", "hora"))

    @field_validator("whatsapp", "date", "time", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)
