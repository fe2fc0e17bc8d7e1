import runpy
from pathlib import Path

from sqlalchemy.exc import OperationalError

from rental.db import models
from rental.services import seeding

SEED_MAIN = runpy.run_path(Path(__file__).resolve().parents[2] / "scripts" / "seed_demo_data.py")["main"]


def test_seed_populates_empty_tables(db_session):
    counts = seeding.seed_demo_data(db_session)
    assert counts == {
        "locations": len(seeding.LOCATIONS),
        "vehicles": len(seeding.FLEET),
        "pricing_policies": len(seeding.DAILY_RATES),
    }
    assert db_session.query(models.Vehicle).count() == len(seeding.FLEET)

    again = seeding.seed_demo_data(db_session)
    assert again == {"locations": 0, "vehicles": 0, "pricing_policies": 0}


def test_dry_run_writes_nothing(db_session):
    counts = seeding.seed_demo_data(db_session, dry_run=True)
    assert counts["locations"] == len(seeding.LOCATIONS)
    assert db_session.query(models.Location).count() == 0


def test_seed_script_dry_run(db_session, capsys):
    assert SEED_MAIN(["--dry-run"]) == 0
    out = capsys.readouterr().out
    assert "Dry run" in out
    assert db_session.query(models.Location).count() == 0


def test_seed_script_writes(db_session, capsys):
    assert SEED_MAIN([]) == 0
    assert "Seeded locations=5" in capsys.readouterr().out
    assert db_session.query(models.PricingPolicy).count() == len(seeding.DAILY_RATES)


def test_seeded_data_is_bookable(client, db_session):
    seeding.seed_demo_data(db_session)
    resp = client.get("/api/vehicles", params={"location_code": "MUC-FLG", "category_code": "LUXUS"})
    assert [v["name"] for v in resp.json()["items"]] == ["Porsche Taycan"]


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "rental-service", "database": "ok"}


def test_health_reports_database_failure(client, db_session, monkeypatch):
    def _broken(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    monkeypatch.setattr(db_session, "execute", _broken)
    resp = client.get("/health")
    assert resp.status_code == 503
    assert resp.json()["database"] == "unreachable"


def test_build_info(client, monkeypatch):
    monkeypatch.setenv("BUILD_SHA", "abc123")
    monkeypatch.setenv("VERSION", "1.4.0")
    resp = client.get("/build-info")
    assert resp.status_code == 200
    body = resp.json()
    assert body["build_sha"] == "abc123"
    assert body["version"] == "1.4.0"
    assert body["service_name"] == "rental-service"
    assert body["image_tag"] is None or isinstance(body["image_tag"], str)


def test_feature_flags_endpoint(client):
    resp = client.get("/feature-flags")
    assert resp.json() == {
        "guest_booking_enabled": True,
        "email_notifications_enabled": False,
        "demo_data_enabled": False,
    }
