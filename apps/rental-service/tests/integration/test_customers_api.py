import uuid
from datetime import date, timedelta

from rental.db.repositories import reservations as reservation_repo


def _register(client, customer_payload, **overrides):
    resp = client.post("/api/customers", json=customer_payload(**overrides))
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_register_customer_returns_created(client, customer_payload):
    body = _register(client, customer_payload, email="Max.Mustermann@Example.DE")
    assert body["email"] == "max.mustermann@example.de"
    assert body["status"] == "Active"
    assert body["customer_id"]


def test_register_duplicate_email_conflicts(client, customer_payload):
    _register(client, customer_payload)
    resp = client.post("/api/customers", json=customer_payload(first_name="Moritz"))
    assert resp.status_code == 409
    assert resp.json()["title"] == "Conflict"


def test_register_underage_customer_rejected(client, customer_payload):
    dob = date.today() - timedelta(days=365 * 17)
    resp = client.post("/api/customers", json=customer_payload(date_of_birth=dob.isoformat()))
    assert resp.status_code == 400
    assert resp.json()["title"] == "Validation error"


def test_register_with_malformed_payload_is_422(client, customer_payload):
    payload = customer_payload()
    payload.pop("last_name")
    assert client.post("/api/customers", json=payload).status_code == 422


def test_customer_reads_own_record_only(client, customer_payload, customer_headers, make_headers):
    own = _register(client, customer_payload)
    other = _register(client, customer_payload, email="erika.musterfrau@example.de", first_name="Erika")

    resp = client.get(f"/api/customers/{own['customer_id']}", headers=customer_headers)
    assert resp.status_code == 200
    assert resp.json()["last_name"] == "Mustermann"

    resp = client.get(f"/api/customers/{other['customer_id']}", headers=customer_headers)
    assert resp.status_code == 403

    resp = client.get(f"/api/customers/{own['customer_id']}")
    assert resp.status_code == 401

    guest = make_headers("someone@example.de")
    assert client.get(f"/api/customers/{own['customer_id']}", headers=guest).status_code == 403


def test_search_requires_call_center(client, customer_payload, customer_headers, call_center_headers):
    _register(client, customer_payload)
    _register(client, customer_payload, email="erika.musterfrau@example.de", first_name="Erika", city="München")

    assert client.get("/api/customers/search").status_code == 401
    assert client.get("/api/customers/search", headers=customer_headers).status_code == 403

    resp = client.get("/api/customers/search", params={"city": "München"}, headers=call_center_headers)
    assert resp.status_code == 200
    page = resp.json()
    assert page["total_count"] == 1
    assert page["items"][0]["first_name"] == "Erika"

    resp = client.get("/api/customers/search", params={"sort_by": "Shoe size"}, headers=call_center_headers)
    assert resp.status_code == 400


def test_search_sorts_ascending_when_field_given(client, customer_payload, call_center_headers):
    _register(client, customer_payload, last_name="Zimmermann")
    _register(client, customer_payload, email="anna.adler@example.de", first_name="Anna", last_name="Adler")

    resp = client.get("/api/customers/search", params={"sort_by": "last_name"}, headers=call_center_headers)
    assert [c["last_name"] for c in resp.json()["items"]] == ["Adler", "Zimmermann"]

    resp = client.get(
        "/api/customers/search",
        params={"sort_by": "last_name", "sort_descending": True},
        headers=call_center_headers,
    )
    assert [c["last_name"] for c in resp.json()["items"]] == ["Zimmermann", "Adler"]


def test_search_by_phone_and_literal_wildcards(client, customer_payload, call_center_headers):
    _register(client, customer_payload, phone_number="+49 30 12345678")

    resp = client.get("/api/customers/search", params={"phone_number": "030 12345678"}, headers=call_center_headers)
    assert resp.json()["total_count"] == 1
    resp = client.get("/api/customers/search", params={"phone_number": "030 1234"}, headers=call_center_headers)
    assert resp.json()["total_count"] == 0

    for term in ("%", "_"):
        resp = client.get("/api/customers/search", params={"search_term": term}, headers=call_center_headers)
        assert resp.json()["total_count"] == 0
    resp = client.get("/api/customers/search", params={"search_term": "muster"}, headers=call_center_headers)
    assert resp.json()["total_count"] == 1


def test_lookup_by_email_and_eligibility(client, customer_payload, call_center_headers):
    created = _register(client, customer_payload)
    resp = client.get("/api/customers/by-email/MAX.MUSTERMANN@example.de", headers=call_center_headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == created["customer_id"]

    resp = client.get(
        f"/api/customers/{created['customer_id']}/eligibility",
        params={"start_date": (date.today() + timedelta(days=3)).isoformat()},
        headers=call_center_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["is_eligible"] is True


def test_suspended_customer_is_not_eligible(client, customer_payload, call_center_headers):
    created = _register(client, customer_payload)
    customer_id = created["customer_id"]
    resp = client.put(
        f"/api/customers/{customer_id}/status",
        json={"status": "Suspended", "reason": "Unpaid invoice"},
        headers=call_center_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "Suspended"

    resp = client.get(
        f"/api/customers/{customer_id}/eligibility",
        params={"start_date": date.today().isoformat()},
        headers=call_center_headers,
    )
    assert resp.json()["is_eligible"] is False
    assert resp.json()["issues"]

    resp = client.put(f"/api/customers/{customer_id}/status", json={"status": "Retired"}, headers=call_center_headers)
    assert resp.status_code == 400


def test_profile_and_email_updates(client, customer_payload, call_center_headers):
    created = _register(client, customer_payload)
    customer_id = created["customer_id"]
    resp = client.put(
        f"/api/customers/{customer_id}/profile",
        json={
            "first_name": "Maximilian",
            "last_name": "Mustermann",
            "phone_number": "030 9876543",
            "street": "Unter den Linden 5",
            "city": "Berlin",
            "postal_code": "10117",
        },
        headers=call_center_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["first_name"] == "Maximilian"
    assert resp.json()["phone_number"] == "+49309876543"

    _register(client, customer_payload, email="erika.musterfrau@example.de")
    resp = client.put(
        f"/api/customers/{customer_id}/email",
        json={"email": "erika.musterfrau@example.de"},
        headers=call_center_headers,
    )
    assert resp.status_code == 409


def test_business_upgrade(client, customer_payload, call_center_headers):
    created = _register(client, customer_payload)
    resp = client.post(
        f"/api/customers/{created['customer_id']}/business",
        json={"company_name": "Muster GmbH", "vat_id": "DE123456789", "payment_terms_days": 14},
        headers=call_center_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["customer_type"] == "Business"
    assert resp.json()["company_name"] == "Muster GmbH"


def test_anonymize_scrubs_personal_data_and_reservations(
    client, db_session, customer_payload, call_center_headers, location_factory, vehicle_factory, pricing_factory
):
    location_factory()
    vehicle = vehicle_factory()
    pricing_factory()
    created = _register(client, customer_payload)
    customer_id = created["customer_id"]
    start = date.today() + timedelta(days=5)
    booking = client.post(
        "/api/reservations",
        json={
            "customer_id": customer_id,
            "vehicle_id": str(vehicle.id),
            "category_code": "KOMPAKT",
            "pickup_date": start.isoformat(),
            "return_date": (start + timedelta(days=2)).isoformat(),
            "pickup_location_code": "BER-HBF",
            "dropoff_location_code": "BER-HBF",
        },
        headers=call_center_headers,
    )
    assert booking.status_code == 201, booking.text

    resp = client.post(f"/api/customers/{customer_id}/anonymize", headers=call_center_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["email"].startswith("anonymized-")
    assert body["status"] == "Blocked"

    db_session.expire_all()
    row = reservation_repo.get_reservation(db_session, uuid.UUID(booking.json()["reservation_id"]))
    assert row.customer_email == body["email"]
    assert "Mustermann" not in (row.customer_name or "")


def test_anonymized_customer_stays_closed(client, customer_payload, call_center_headers):
    customer_id = _register(client, customer_payload)["customer_id"]
    assert client.post(f"/api/customers/{customer_id}/anonymize", headers=call_center_headers).status_code == 200

    resp = client.put(
        f"/api/customers/{customer_id}/status",
        json={"status": "Active", "reason": "Reopen"},
        headers=call_center_headers,
    )
    assert resp.status_code == 400
    assert "anonymized" in resp.json()["detail"]

    resp = client.put(
        f"/api/customers/{customer_id}/email",
        json={"email": "max.neu@example.de"},
        headers=call_center_headers,
    )
    assert resp.status_code == 400

    resp = client.get(
        f"/api/customers/{customer_id}/eligibility",
        params={"start_date": (date.today() + timedelta(days=7)).isoformat()},
        headers=call_center_headers,
    )
    assert resp.json()["is_eligible"] is False
    assert client.get(f"/api/customers/{customer_id}", headers=call_center_headers).json()["status"] == "Blocked"


def test_unknown_customer_is_404(client, call_center_headers):
    resp = client.get("/api/customers/00000000-0000-0000-0000-000000000001", headers=call_center_headers)
    assert resp.status_code == 404
