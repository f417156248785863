import pytest

from app import worker
from app.domain.notifications.repository import RecordStoreError


def test_scan_minutes():
    assert worker.scan_minutes(5) == {0, 5, 10, 15, 20, 25, 30, 35, 40, 45, 50, 55}
    assert worker.scan_minutes(60) == {0}


@pytest.mark.parametrize("interval", [0, -5, 61])
def test_scan_minutes_rejects_out_of_range(interval):
    with pytest.raises(ValueError):
        worker.scan_minutes(interval)


class UnavailableStore:
    async def fetch_config_entries(self):
        raise RecordStoreError("GET config failed")


async def test_scan_task_reports_failures_instead_of_raising(monkeypatch):
    monkeypatch.setattr(worker, "get_record_store", lambda: UnavailableStore())

    result = await worker.notification_scan_task({"job_id": "test"})

    assert result == {"success": False, "error": "RecordStoreError"}


async def test_scan_task_returns_report(monkeypatch, store, add_config):
    add_config("Studio", "111")
    monkeypatch.setattr(worker, "get_record_store", lambda: store)
    monkeypatch.setattr(worker.config, "TELEGRAM_BOT_TOKEN", None)

    result = await worker.notification_scan_task({})

    assert result["success"] is True
    assert result["skipped_reason"] == "missing_configuration"


def test_redis_settings_from_url():
    plain = worker.get_redis_settings("redis://localhost:6380")
    assert (plain.host, plain.port, plain.ssl) == ("localhost", 6380, False)

    tls = worker.get_redis_settings("rediss://default:pw@cache.example.com:6379")
    assert tls.host == "cache.example.com"
    assert tls.password == "pw"
    assert tls.ssl is True
