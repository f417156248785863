from datetime import datetime
from decimal import Decimal

import pytest

from app.domain.notifications.commands import AgendaScope, build_agenda, match_command
from app.domain.notifications.formatting import format_brl, parse_price
from app.domain.notifications.schemas import AppointmentRecord

NOW = datetime(2024, 6, 12, 9, 30)  # Wednesday


def appointment(appointment_id, when, **fields):
    return AppointmentRecord(id=appointment_id, when=when, **fields)


@pytest.mark.parametrize(
    "text,scope",
    [
        ("/command1", AgendaScope.TODAY),
        ("/START", AgendaScope.TODAY),
        ("Today", AgendaScope.TODAY),
        ("  /hoje ", AgendaScope.TODAY),
        ("/command2@SalonBot", AgendaScope.THIS_MONTH),
        ("This month please", AgendaScope.THIS_MONTH),
        ("/command3", AgendaScope.THIS_WEEK),
        ("/command4", AgendaScope.NEXT_MONTH),
        ("next month", AgendaScope.NEXT_MONTH),
    ],
)
def test_recognised_commands(text, scope):
    assert match_command(text) is scope


@pytest.mark.parametrize("text", [None, "", "oi, tudo bem?", "please show today", "/help"])
def test_other_text_is_ignored(text):
    assert match_command(text) is None


def test_today_agenda_is_sorted_and_totalled(settings):
    appointments = [
        appointment("2", "12/06/2024 15:00", client_name="Bruna", service="Manutenção", price="R$ 1.200,50"),
        appointment("1", "2024-06-12T10:00", client_name="Alice", service="Aplicação", price="80,00"),
        appointment("3", "2024-06-12T11:00", client_name="Cida", confirmed=False, price="500"),
        appointment("4", "2024-06-13T10:00", client_name="Dora"),
    ]

    text = build_agenda(AgendaScope.TODAY, appointments, NOW, settings)

    assert "Hoje (12/06)" in text
    assert text.index("Alice") < text.index("Bruna")
    assert "Cida" not in text
    assert "Dora" not in text
    assert "TOTAL HOJE: R$ 1.280,50" in text


def test_empty_today_agenda(settings):
    text = build_agenda(AgendaScope.TODAY, [], NOW, settings)
    assert "Você não tem agendamentos para hoje (12/06)" in text


def test_month_agenda_shows_date_and_weekday(settings):
    appointments = [
        appointment("1", "2024-06-28T14:00", client_name="Alice", price="100"),
        appointment("2", "01/06/2024 09:00", client_name="Bruna", price="50"),
        appointment("3", "2024-07-01T09:00", client_name="Clara"),
    ]

    text = build_agenda(AgendaScope.THIS_MONTH, appointments, NOW, settings)

    assert "Agenda VIP - junho" in text
    assert "01/06 (sáb) às 09:00" in text
    assert "28/06 (sex) às 14:00" in text
    assert text.index("Bruna") < text.index("Alice")
    assert "Clara" not in text
    assert "TOTAL MÊS: R$ 150,00" in text


def test_empty_month_agenda(settings):
    appointments = [appointment("1", "2024-06-20T10:00", confirmed=False)]
    text = build_agenda(AgendaScope.THIS_MONTH, appointments, NOW, settings)
    assert "Não há agendamentos para o mês de junho" in text


def test_week_agenda_runs_sunday_to_saturday(settings):
    appointments = [
        appointment("sun", "2024-06-09T10:00", client_name="Domingo"),
        appointment("sat", "2024-06-15T18:00", client_name="Sabado"),
        appointment("next", "2024-06-16T10:00", client_name="Proxima"),
    ]

    text = build_agenda(AgendaScope.THIS_WEEK, appointments, NOW, settings)

    assert "Esta Semana" in text
    assert "Domingo" in text
    assert "Sabado" in text
    assert "Proxima" not in text


def test_next_month_agenda(settings):
    appointments = [appointment("1", "2024-07-03T10:00", client_name="Julia", price="90")]

    text = build_agenda(AgendaScope.NEXT_MONTH, appointments, NOW, settings)

    assert "julho (Próx. Mês)" in text
    assert "TOTAL PREVISTO: R$ 90,00" in text
    assert "próximo mês (agosto)" in build_agenda(
        AgendaScope.NEXT_MONTH, [], datetime(2024, 7, 31, 9, 0), settings
    )


def test_client_names_are_html_escaped(settings):
    appointments = [appointment("1", "2024-06-12T10:00", client_name="<b>Ana</b> & Co")]
    text = build_agenda(AgendaScope.TODAY, appointments, NOW, settings)
    assert "&lt;b&gt;Ana&lt;/b&gt; &amp; Co" in text


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("R$ 1.234,56", Decimal("1234.56")),
        ("80", Decimal("80")),
        ("80,5", Decimal("80.5")),
        (None, Decimal("0")),
        ("", Decimal("0")),
        ("a combinar", Decimal("0")),
    ],
)
def test_parse_price(raw, expected):
    assert parse_price(raw) == expected


def test_format_brl():
    assert format_brl(Decimal("1234.5")) == "1.234,50"
    assert format_brl(Decimal("0")) == "0,00"
    assert format_brl(Decimal("1234567.891")) == "1.234.567,89"
