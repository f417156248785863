import pytest
from fastapi.testclient import TestClient

from app import config
from app.domain.notifications.router import get_notification_service
from app.domain.notifications.schemas import RunReport
from app.main import app

SECRET = "s3cret"


class StubService:
    def __init__(self, report=None, error=None):
        self.report = report or RunReport(recipients=2, reminders_matched=1, reminders_sent=1)
        self.error = error
        self.scans = 0
        self.commands: list[tuple[str, str]] = []
        self.bookings = []

    async def run_scan(self):
        self.scans += 1
        if self.error:
            raise self.error
        return self.report

    async def handle_command(self, chat_id, text):
        self.commands.append((chat_id, text))
        if self.error:
            raise self.error
        return True

    async def notify_new_booking(self, booking):
        self.bookings.append(booking)
        return True


@pytest.fixture
def service():
    return StubService()


@pytest.fixture
def client(service, monkeypatch):
    monkeypatch.setattr(config, "CRON_SECRET", SECRET)
    monkeypatch.setattr(config, "TELEGRAM_WEBHOOK_SECRET", None)
    app.dependency_overrides[get_notification_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(token=SECRET):
    return {"Authorization": f"Bearer {token}"}


def test_trigger_returns_run_report(client, service):
    response = client.get("/api/cron/reminders", headers=auth())

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["reminders_sent"] == 1
    assert body["recipients"] == 2
    assert service.scans == 1


@pytest.mark.parametrize("headers", [{}, auth("wrong"), {"Authorization": SECRET}])
def test_trigger_rejects_bad_credentials_before_running(client, service, headers):
    response = client.get("/api/cron/reminders", headers=headers)

    assert response.status_code == 401
    assert service.scans == 0


def test_trigger_refuses_when_secret_not_configured(client, service, monkeypatch):
    monkeypatch.setattr(config, "CRON_SECRET", None)

    response = client.get("/api/cron/reminders", headers=auth())

    assert response.status_code == 500
    assert service.scans == 0


def test_trigger_failure_returns_generic_error(client, service):
    service.error = RuntimeError("store exploded")

    response = client.get("/api/cron/reminders", headers=auth())

    assert response.status_code == 500
    assert response.json() == {"error": "Internal error"}


def test_webhook_routes_text_to_command_handler(client, service):
    update = {"update_id": 1, "message": {"chat": {"id": 555}, "text": "/hoje"}}

    response = client.post("/api/telegram/webhook", json=update)

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert service.commands == [("555", "/hoje")]


def test_webhook_acknowledges_unparseable_body(client, service):
    response = client.post(
        "/api/telegram/webhook", content=b"not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert service.commands == []


def test_webhook_acknowledges_updates_without_text(client, service):
    response = client.post("/api/telegram/webhook", json={"update_id": 2, "edited_message": {}})

    assert response.json() == {"ok": True}
    assert service.commands == []


def test_webhook_acknowledges_handler_errors(client, service):
    service.error = RuntimeError("gateway down")
    update = {"update_id": 3, "message": {"chat": {"id": 555}, "text": "/mes"}}

    response = client.post("/api/telegram/webhook", json=update)

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_webhook_secret_mismatch_is_dropped(client, service, monkeypatch):
    monkeypatch.setattr(config, "TELEGRAM_WEBHOOK_SECRET", "hook-secret")
    update = {"update_id": 4, "message": {"chat": {"id": 555}, "text": "/hoje"}}

    wrong = client.post(
        "/api/telegram/webhook", json=update, headers={"X-Telegram-Bot-Api-Secret-Token": "nope"}
    )
    right = client.post(
        "/api/telegram/webhook",
        json=update,
        headers={"X-Telegram-Bot-Api-Secret-Token": "hook-secret"},
    )

    assert wrong.json() == {"ok": True}
    assert right.json() == {"ok": True}
    assert service.commands == [("555", "/hoje")]


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


BOOKING = {
    "nome": "Ana",
    "whatsapp": "5511999990000",
    "servico": "Volume russo",
    "data": "12/06/2024",
    "hora": "14:30",
}


def test_new_booking_alert_is_forwarded(client, service):
    response = client.post("/api/notifications/new-booking", json=BOOKING, headers=auth())

    assert response.status_code == 200
    assert response.json() == {"ok": True, "delivered": True}
    assert service.bookings[0].client_name == "Ana"
    assert service.bookings[0].time == "14:30"


def test_new_booking_alert_requires_credentials(client, service):
    response = client.post("/api/notifications/new-booking", json=BOOKING)

    assert response.status_code == 401
    assert service.bookings == []


def test_new_booking_alert_rejects_incomplete_booking(client, service):
    response = client.post("/api/notifications/new-booking", json={"nome": "Ana"}, headers=auth())

    assert response.status_code == 422
    assert service.bookings == []
