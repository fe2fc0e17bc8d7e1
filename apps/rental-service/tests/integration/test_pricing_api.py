from datetime import date, timedelta
from decimal import Decimal

from rental.domain.fleet import VehicleCategory


def _quote(client, category="KOMPAKT", days=3, location_code=None):
    start = date.today() + timedelta(days=2)
    payload = {
        "category_code": category,
        "pickup_date": start.isoformat(),
        # days counts both ends, so the shortest valid quote is two days
        "return_date": (start + timedelta(days=days - 1)).isoformat(),
    }
    if location_code:
        payload["location_code"] = location_code
    return client.post("/api/pricing/calculate", json=payload)


def test_calculate_uses_general_policy(client, pricing_factory):
    pricing_factory(category=VehicleCategory.KOMPAKT, rate="39.99")
    resp = _quote(client, days=3)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_days"] == 3
    assert body["daily_rate_net"] == "39.99"
    assert body["total_price_net"] == "119.97"
    assert Decimal(body["total_price_gross"]) == Decimal(body["total_price_net"]) + Decimal(body["total_price_vat"])
    assert Decimal(body["vat_rate"]) == Decimal("0.19")
    assert body["currency"] == "EUR"


def test_location_policy_takes_precedence(client, pricing_factory):
    pricing_factory(rate="39.99")
    pricing_factory(rate="44.99", location_code="MUC-FLG")
    assert _quote(client, days=2, location_code="muc-flg").json()["daily_rate_net"] == "44.99"
    assert _quote(client, days=2, location_code="BER-HBF").json()["daily_rate_net"] == "39.99"


def test_calculate_without_policy_is_404(client):
    resp = _quote(client, category="LUXUS")
    assert resp.status_code == 404
    assert "LUXUS" in resp.json()["detail"]


def test_calculate_rejects_bad_input(client, pricing_factory):
    pricing_factory()
    assert _quote(client, category="SPORT").status_code == 400
    today = date.today()
    resp = client.post(
        "/api/pricing/calculate",
        json={"category_code": "KOMPAKT", "pickup_date": today.isoformat(), "return_date": today.isoformat()},
    )
    assert resp.status_code == 400


def test_policy_administration(client, fleet_manager_headers, customer_headers):
    payload = {"category_code": "suv", "daily_rate_net": "69.99"}
    assert client.post("/api/pricing/policies", json=payload).status_code == 401
    assert client.post("/api/pricing/policies", json=payload, headers=customer_headers).status_code == 403

    resp = client.post("/api/pricing/policies", json=payload, headers=fleet_manager_headers)
    assert resp.status_code == 201, resp.text
    policy = resp.json()
    assert policy["category_code"] == "SUV"
    assert policy["is_active"] is True
    assert policy["daily_rate_gross"] == "83.29"

    resp = client.put(
        f"/api/pricing/policies/{policy['id']}/daily-rate",
        json={"daily_rate_net": "74.99"},
        headers=fleet_manager_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["daily_rate_net"] == "74.99"
    assert _quote(client, category="SUV", days=2).json()["daily_rate_net"] == "74.99"

    resp = client.post(f"/api/pricing/policies/{policy['id']}/deactivate", headers=fleet_manager_headers)
    assert resp.json()["is_active"] is False
    assert _quote(client, category="SUV").status_code == 404

    resp = client.put(
        f"/api/pricing/policies/{policy['id']}/daily-rate",
        json={"daily_rate_net": "79.99"},
        headers=fleet_manager_headers,
    )
    assert resp.status_code == 400

    listed = client.get("/api/pricing/policies", params={"category_code": "SUV"}, headers=fleet_manager_headers)
    assert len(listed.json()) == 1
    active = client.get("/api/pricing/policies", params={"active_only": True}, headers=fleet_manager_headers)
    assert active.json() == []


def test_policy_validity_window_rejected(client, fleet_manager_headers):
    resp = client.post(
        "/api/pricing/policies",
        json={
            "category_code": "KLEIN",
            "daily_rate_net": "29.99",
            "effective_from": "2030-02-01T00:00:00Z",
            "effective_until": "2030-01-01T00:00:00Z",
        },
        headers=fleet_manager_headers,
    )
    assert resp.status_code == 400


def test_unknown_policy_is_404(client, fleet_manager_headers):
    resp = client.post(
        "/api/pricing/policies/00000000-0000-0000-0000-000000000001/deactivate",
        headers=fleet_manager_headers,
    )
    assert resp.status_code == 404
