from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def test_health_db():
    r = client.get("/health/db")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_health_migrations_basic():
    r = client.get("/health/migrations")
    assert r.status_code == 200
    b = r.json()
    assert b["code_heads"] == ["a3f1c2d4e5b6"]
    # test database is built with create_all, never stamped
    assert b["db_version"] is None
    assert b["ok"] is False
