from datetime import date, timedelta

from rental.domain.fleet import FuelType, VehicleCategory


def _vehicle_payload(**overrides):
    payload = {
        "name": "BMW 3er",
        "category_code": "MITTEL",
        "location_code": "ber-hbf",
        "seats": 5,
        "fuel_type": "Petrol",
        "transmission_type": "Automatic",
        "license_plate": "B-MW 320",
        "manufacturer": "BMW",
        "model": "320i",
        "year": 2024,
        "daily_rate_net": "79.99",
    }
    payload.update(overrides)
    return payload


def test_categories_are_public(client):
    resp = client.get("/api/vehicles/categories")
    assert resp.status_code == 200
    codes = {c["code"]: c["name"] for c in resp.json()}
    assert codes["KOMPAKT"] == "Kompaktklasse"
    assert len(codes) == len(VehicleCategory)


def test_search_lists_available_vehicles_with_gross_rates(client, location_factory, vehicle_factory):
    location_factory()
    vehicle_factory(name="VW Golf", rate="49.99")
    vehicle_factory(name="VW Up!", category=VehicleCategory.KLEIN, rate="29.99")

    resp = client.get("/api/vehicles")
    assert resp.status_code == 200
    page = resp.json()
    assert page["total_count"] == 2
    golf = next(v for v in page["items"] if v["name"] == "VW Golf")
    assert golf["daily_rate_gross"] == "59.49"
    assert golf["city"] == "Berlin"
    assert golf["category_name"] == "Kompaktklasse"

    resp = client.get("/api/vehicles", params={"category_code": "klein"})
    assert [v["name"] for v in resp.json()["items"]] == ["VW Up!"]


def test_search_filters_by_fuel_and_price(client, location_factory, vehicle_factory):
    location_factory()
    vehicle_factory(name="Tesla Model 3", fuel_type=FuelType.ELECTRIC, rate="89.99")
    vehicle_factory(name="VW Golf", rate="49.99")

    resp = client.get("/api/vehicles", params={"fuel_type": "Electric"})
    assert [v["name"] for v in resp.json()["items"]] == ["Tesla Model 3"]

    resp = client.get("/api/vehicles", params={"max_daily_rate_gross": "60"})
    assert [v["name"] for v in resp.json()["items"]] == ["VW Golf"]

    resp = client.get("/api/vehicles", params={"pickup_date": date.today().isoformat()})
    assert resp.status_code == 400


def test_search_hides_booked_vehicles_for_period(
    client, location_factory, vehicle_factory, pricing_factory, customer_payload, call_center_headers
):
    location_factory()
    booked = vehicle_factory(name="VW Golf")
    vehicle_factory(name="Seat Leon", rate="47.99")
    pricing_factory()
    customer = client.post("/api/customers", json=customer_payload()).json()
    start = date.today() + timedelta(days=10)
    resp = client.post(
        "/api/reservations",
        json={
            "customer_id": customer["customer_id"],
            "vehicle_id": str(booked.id),
            "category_code": "KOMPAKT",
            "pickup_date": start.isoformat(),
            "return_date": (start + timedelta(days=3)).isoformat(),
            "pickup_location_code": "BER-HBF",
            "dropoff_location_code": "BER-HBF",
        },
        headers=call_center_headers,
    )
    assert resp.status_code == 201, resp.text

    params = {
        "pickup_date": (start + timedelta(days=2)).isoformat(),
        "return_date": (start + timedelta(days=6)).isoformat(),
    }
    names = [v["name"] for v in client.get("/api/vehicles", params=params).json()["items"]]
    assert names == ["Seat Leon"]

    later = {
        "pickup_date": (start + timedelta(days=4)).isoformat(),
        "return_date": (start + timedelta(days=6)).isoformat(),
    }
    assert len(client.get("/api/vehicles", params=later).json()["items"]) == 2


def test_add_vehicle_requires_fleet_manager(client, location_factory, fleet_manager_headers, call_center_headers):
    location_factory()
    assert client.post("/api/vehicles", json=_vehicle_payload()).status_code == 401
    assert client.post("/api/vehicles", json=_vehicle_payload(), headers=call_center_headers).status_code == 403

    resp = client.post("/api/vehicles", json=_vehicle_payload(), headers=fleet_manager_headers)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["location_code"] == "BER-HBF"
    assert body["status"] == "Available"
    assert body["daily_rate_vat"] == "15.20"

    resp = client.get(f"/api/vehicles/{body['id']}")
    assert resp.status_code == 200
    assert resp.json()["license_plate"] == "B-MW 320"


def test_add_vehicle_validation(client, location_factory, fleet_manager_headers):
    location_factory()
    resp = client.post("/api/vehicles", json=_vehicle_payload(location_code="XYZ-ABC"), headers=fleet_manager_headers)
    assert resp.status_code == 404
    resp = client.post("/api/vehicles", json=_vehicle_payload(daily_rate_net="0"), headers=fleet_manager_headers)
    assert resp.status_code == 400
    resp = client.post("/api/vehicles", json=_vehicle_payload(category_code="SPORT"), headers=fleet_manager_headers)
    assert resp.status_code == 400

    assert client.post("/api/vehicles", json=_vehicle_payload(), headers=fleet_manager_headers).status_code == 201
    dup = client.post("/api/vehicles", json=_vehicle_payload(name="BMW 3er Touring"), headers=fleet_manager_headers)
    assert dup.status_code == 409


def test_vehicles_only_go_to_active_locations(client, location_factory, vehicle_factory, fleet_manager_headers):
    location_factory()
    location_factory(code="MUC-FLG", name="München Flughafen", city="München", postal_code="85356")
    vehicle = vehicle_factory()
    resp = client.put("/api/locations/MUC-FLG/status", json={"status": "Closed"}, headers=fleet_manager_headers)
    assert resp.status_code == 200

    resp = client.post("/api/vehicles", json=_vehicle_payload(location_code="MUC-FLG"), headers=fleet_manager_headers)
    assert resp.status_code == 400
    assert "not active" in resp.json()["detail"]

    resp = client.put(f"/api/vehicles/{vehicle.id}/location", json={"location_code": "MUC-FLG"}, headers=fleet_manager_headers)
    assert resp.status_code == 400
    assert client.get(f"/api/vehicles/{vehicle.id}").json()["location_code"] == "BER-HBF"


def test_vehicle_status_location_and_rate(client, location_factory, vehicle_factory, fleet_manager_headers):
    location_factory()
    location_factory(code="MUC-FLG", name="München Flughafen", city="München", postal_code="85356")
    vehicle = vehicle_factory()

    resp = client.put(f"/api/vehicles/{vehicle.id}/location", json={"location_code": "muc-flg"}, headers=fleet_manager_headers)
    assert resp.status_code == 200
    assert resp.json()["city"] == "München"

    resp = client.put(f"/api/vehicles/{vehicle.id}/location", json={"location_code": "HAM-HBF"}, headers=fleet_manager_headers)
    assert resp.status_code == 404

    resp = client.put(f"/api/vehicles/{vehicle.id}/daily-rate", json={"daily_rate_net": "55.00"}, headers=fleet_manager_headers)
    assert resp.status_code == 200
    assert resp.json()["daily_rate_gross"] == "65.45"

    resp = client.put(f"/api/vehicles/{vehicle.id}/status", json={"status": "Maintenance"}, headers=fleet_manager_headers)
    assert resp.json()["status"] == "Maintenance"
    assert client.get("/api/vehicles").json()["total_count"] == 0
    resp = client.get("/api/vehicles", params={"status": "Maintenance"})
    assert resp.json()["total_count"] == 1

    resp = client.put(f"/api/vehicles/{vehicle.id}/status", json={"status": "Parked"}, headers=fleet_manager_headers)
    assert resp.status_code == 400


def test_unknown_vehicle_is_404(client):
    assert client.get("/api/vehicles/00000000-0000-0000-0000-000000000001").status_code == 404


def test_locations_crud(client, fleet_manager_headers):
    payload = {
        "code": "fra-flg",
        "name": "Frankfurt Flughafen",
        "street": "Hugo-Eckener-Ring 1",
        "city": "Frankfurt am Main",
        "postal_code": "60549",
    }
    assert client.post("/api/locations", json=payload).status_code == 401
    resp = client.post("/api/locations", json=payload, headers=fleet_manager_headers)
    assert resp.status_code == 201
    assert resp.json()["code"] == "FRA-FLG"
    assert resp.json()["status"] == "Active"

    assert client.post("/api/locations", json=payload, headers=fleet_manager_headers).status_code == 409

    resp = client.put(
        "/api/locations/FRA-FLG",
        json={"name": "Frankfurt Airport", "street": "Hugo-Eckener-Ring 1", "city": "Frankfurt am Main", "postal_code": "60549"},
        headers=fleet_manager_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Frankfurt Airport"

    resp = client.put("/api/locations/FRA-FLG/status", json={"status": "Closed"}, headers=fleet_manager_headers)
    assert resp.json()["status"] == "Closed"

    assert [l["code"] for l in client.get("/api/locations").json()] == ["FRA-FLG"]
    assert client.get("/api/locations", params={"active_only": True}).json() == []
    assert client.get("/api/locations/fra-flg").status_code == 200
    assert client.get("/api/locations/HAM-HBF").status_code == 404


def test_invalid_location_code_rejected(client, fleet_manager_headers):
    payload = {"code": "FRANKFURT", "name": "Frankfurt", "street": "Zeil 1", "city": "Frankfurt", "postal_code": "60313"}
    resp = client.post("/api/locations", json=payload, headers=fleet_manager_headers)
    assert resp.status_code == 400
