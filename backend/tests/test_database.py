import pytest

from camera_tracker import database


@pytest.fixture
def captured(monkeypatch):
    calls = {}

    def fake_create_engine(url, **kwargs):
        calls["url"] = url
        calls.update(kwargs)
        return object()

    monkeypatch.setattr(database, "create_engine", fake_create_engine)
    return calls


def test_postgres_engine_applies_request_timeout(captured):
    database.build_engine("postgresql+psycopg://u:p@db:5432/tracker", timeout=2.5)

    assert captured["pool_timeout"] == 2.5
    assert captured["pool_pre_ping"] is True
    assert captured["connect_args"] == {
        "connect_timeout": 2,
        "options": "-c statement_timeout=2500",
    }


def test_postgres_connect_timeout_is_at_least_one_second(captured):
    database.build_engine("postgresql+psycopg://u:p@db:5432/tracker", timeout=0.3)
    assert captured["connect_args"]["connect_timeout"] == 1
    assert captured["connect_args"]["options"] == "-c statement_timeout=300"


def test_sqlite_engine_skips_server_timeouts(captured):
    database.build_engine("sqlite://", timeout=5)

    assert captured["connect_args"] == {"check_same_thread": False}
    assert "pool_timeout" not in captured
