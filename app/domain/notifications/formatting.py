"""Message rendering - Telegram HTML, Brazilian Portuguese"""

import html
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from .schemas import AppointmentRecord, NewBooking

# Fixed tables so output does not depend on the host locale
PT_BR_MONTHS = (
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
)
PT_BR_WEEKDAYS = ("seg", "ter", "qua", "qui", "sex", "sáb", "dom")

SEPARATOR = "━━━━━━━━━━━━━━━"

ScheduledItem = tuple[AppointmentRecord, datetime]


def month_name(moment: datetime) -> str:
    return PT_BR_MONTHS[moment.month - 1]


def _text(value: Optional[str], default: str = "-") -> str:
    return html.escape(value) if value else default


def parse_price(value: Optional[str]) -> Decimal:
    """
    Parse a Brazilian money string ("R$ 1.234,56", "80", "80,50") into a Decimal.
    Anything unparsable counts as zero.
    """
    if not value:
        return Decimal("0")
    cleaned = re.sub(r"[^\d,.-]", "", str(value))
    cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")


def format_brl(amount: Decimal) -> str:
    """1234.5 -> '1.234,50'"""
    formatted = f"{amount.quantize(Decimal('0.01')):,.2f}"
    return formatted.replace(",", "_").replace(".", ",").replace("_", ".")


def render_reminder(appointment: AppointmentRecord, when: datetime, business_name: str) -> str:
    return (
        f"⏰ <b>Lembrete VIP {_text(business_name, '')}</b>\n\n"
        f"👤 <b>Cliente:</b> {_text(appointment.client_name)}\n"
        f"🎨 <b>Serviço:</b> {_text(appointment.service)}\n"
        f"⏰ <b>Horário:</b> {when:%H:%M}\n\n"
        f"🚀 <i>Sua cliente chega em breve!</i>"
    )


def render_new_booking(booking: NewBooking, business_name: str) -> str:
    return (
        f"✨ <b>Novo Agendamento no {_text(business_name, '')}!</b> ✨\n\n"
        f"👤 <b>Cliente:</b> {_text(booking.client_name)}\n"
        f"📱 <b>WhatsApp:</b> {_text(booking.whatsapp)}\n"
        f"🎨 <b>Serviço:</b> {_text(booking.service)}\n"
        f"📅 <b>Data:</b> {_text(booking.date)}\n"
        f"⏰ <b>Horário:</b> {_text(booking.time)}\n\n"
        "🚀 <i>Agendado via link do Instagram</i>"
    )


def render_daily_summary(items: list[ScheduledItem]) -> str:
    if not items:
        return (
            "✨ <b>Bom dia!</b> ✨\n\n"
            "Você não tem agendamentos para hoje.\n"
            "💖 <i>Que tal aproveitar para organizar o studio?</i>"
        )

    lines = [
        f"⏰ <b>{when:%H:%M}</b> - {_text(appointment.client_name)}\n🎨 {_text(appointment.service)}"
        for appointment, when in items
    ]
    return (
        "✨ <b>Bom dia! Agenda de Hoje</b> ✨\n\n"
        + "\n\n".join(lines)
        + "\n\n🚀 <i>Tenha um ótimo dia de trabalho!</i>"
    )


def _price_line(appointment: AppointmentRecord) -> str:
    return f"💰 R$ {format_brl(parse_price(appointment.price))}"


def _total(items: list[ScheduledItem]) -> Decimal:
    return sum((parse_price(appointment.price) for appointment, _ in items), Decimal("0"))


def _dated_entry(appointment: AppointmentRecord, when: datetime) -> str:
    weekday = PT_BR_WEEKDAYS[when.weekday()]
    return (
        f"<b>{when:%d/%m} ({weekday}) às {when:%H:%M}</b>\n"
        f"👤 {_text(appointment.client_name)}\n"
        f"🎨 {_text(appointment.service)}\n"
        f"{_price_line(appointment)}"
    )


def _agenda(title: str, entries: list[str], total_label: str, total: Decimal) -> str:
    return (
        f"✨ <b>{title}</b> ✨\n\n"
        + "\n\n".join(entries)
        + f"\n\n{SEPARATOR}\n💰 <b>{total_label}: R$ {format_brl(total)}</b>"
    )


def render_today_agenda(items: list[ScheduledItem], now: datetime) -> str:
    if not items:
        return f"✨ <b>Olá!</b> ✨\n\nVocê não tem agendamentos para hoje ({now:%d/%m})."

    entries = [
        f"<b>{when:%H:%M}</b> - {_text(appointment.client_name)}\n"
        f"🎨 {_text(appointment.service)}\n"
        f"{_price_line(appointment)}"
        for appointment, when in items
    ]
    return _agenda(f"Agenda VIP - Hoje ({now:%d/%m})", entries, "TOTAL HOJE", _total(items))


def render_month_agenda(items: list[ScheduledItem], month: datetime) -> str:
    name = month_name(month)
    if not items:
        return f"✨ <b>Olá!</b> ✨\n\nNão há agendamentos para o mês de {name}."

    entries = [_dated_entry(appointment, when) for appointment, when in items]
    return _agenda(f"Agenda VIP - {name}", entries, "TOTAL MÊS", _total(items))


def render_week_agenda(items: list[ScheduledItem]) -> str:
    if not items:
        return "✨ <b>Olá!</b> ✨\n\nNão há agendamentos para esta semana (domingo a sábado)."

    entries = [_dated_entry(appointment, when) for appointment, when in items]
    return _agenda("Agenda VIP - Esta Semana", entries, "TOTAL SEMANA", _total(items))


def render_next_month_agenda(items: list[ScheduledItem], month: datetime) -> str:
    name = month_name(month)
    if not items:
        return f"✨ <b>Olá!</b> ✨\n\nNão há agendamentos para o próximo mês ({name})."

    entries = [_dated_entry(appointment, when) for appointment, when in items]
    return _agenda(f"Agenda VIP - {name} (Próx. Mês)", entries, "TOTAL PREVISTO", _total(items))
