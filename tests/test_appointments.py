from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import func, select

from brokerdesk.models import Appointment
from brokerdesk.services.appointment_service import appointment_stats
from tests.factories import appointment_payload, client_payload, property_payload


def _client(api, headers, **overrides):
    r = api.post("/api/clients", headers=headers, json=client_payload(**overrides))
    assert r.status_code == 201, r.text
    return r.json()


def _property(api, headers, **overrides):
    r = api.post("/api/properties", headers=headers, json=property_payload(**overrides))
    assert r.status_code == 201, r.text
    return r.json()


def _book(api, headers, client_id, property_id=None, **overrides):
    r = api.post("/api/appointments", headers=headers, json=appointment_payload(client_id, property_id, **overrides))
    assert r.status_code == 201, r.text
    return r.json()


def test_create_appointment_copies_display_fields(api, broker):
    c = _client(api, broker["headers"])
    p = _property(api, broker["headers"])

    a = _book(api, broker["headers"], c["id"], p["id"])
    assert a["status"] == "scheduled"
    assert a["time"] == "10:30"
    assert a["date"] == "2026-11-03"
    assert a["client_name"] == "Sam Buyer"
    assert a["client_phone"] == c["phone"]
    assert a["property_address"] == p["address"]
    assert a["broker_name"] == "Jane Doe"
    assert a["broker_city"] == "Austin"


def test_create_appointment_without_property(api, broker):
    c = _client(api, broker["headers"])
    a = _book(api, broker["headers"], c["id"])
    assert a["property_id"] is None
    assert a["property_address"] is None


def test_foreign_client_is_invalid_reference_and_nothing_is_written(api, db, broker, other_broker):
    theirs = _client(api, other_broker["headers"])

    r = api.post("/api/appointments", headers=broker["headers"], json=appointment_payload(theirs["id"]))
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_reference"
    assert r.json()["detail"] == "client does not belong to broker"

    assert db.scalar(select(func.count(Appointment.id))) == 0


def test_foreign_or_unknown_property_is_invalid_reference(api, broker, other_broker):
    mine = _client(api, broker["headers"])
    theirs = _property(api, other_broker["headers"])

    r = api.post("/api/appointments", headers=broker["headers"], json=appointment_payload(mine["id"], theirs["id"]))
    assert r.status_code == 400
    assert r.json()["detail"] == "property does not belong to broker"

    r = api.post("/api/appointments", headers=broker["headers"], json=appointment_payload(mine["id"], "nope"))
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_reference"

    r = api.post("/api/appointments", headers=broker["headers"], json=appointment_payload("nope"))
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_reference"


def test_create_rejects_bad_date_and_time(api, broker):
    c = _client(api, broker["headers"])
    h = broker["headers"]
    assert api.post("/api/appointments", headers=h, json=appointment_payload(c["id"], date="03-11-2026")).status_code == 400
    assert api.post("/api/appointments", headers=h, json=appointment_payload(c["id"], time="25:00")).status_code == 400
    assert api.post("/api/appointments", headers=h, json=appointment_payload(c["id"], type="lunch")).status_code == 400


def test_list_is_ordered_by_date_then_time(api, broker):
    c = _client(api, broker["headers"])
    h = broker["headers"]
    late = _book(api, h, c["id"], date="2026-11-05", time="09:00")
    early_pm = _book(api, h, c["id"], date="2026-11-03", time="15:00")
    early_am = _book(api, h, c["id"], date="2026-11-03", time="08:15")

    ids = [row["id"] for row in api.get("/api/appointments", headers=h).json()]
    assert ids == [early_am["id"], early_pm["id"], late["id"]]


def test_list_filters(api, broker):
    h = broker["headers"]
    c1 = _client(api, h)
    c2 = _client(api, h, first_name="Other")

    a1 = _book(api, h, c1["id"], date="2026-11-03", type="site_visit")
    a2 = _book(api, h, c1["id"], date="2026-11-10", type="call")
    a3 = _book(api, h, c2["id"], date="2026-12-01", type="meeting")
    api.put(f"/api/appointments/{a3['id']}", headers=h, json={"status": "cancelled"})

    def ids(**params):
        r = api.get("/api/appointments", headers=h, params=params)
        assert r.status_code == 200, r.text
        return [row["id"] for row in r.json()]

    assert ids(date="2026-11-03") == [a1["id"]]
    assert ids(type="call") == [a2["id"]]
    assert ids(status="cancelled") == [a3["id"]]
    assert ids(status="scheduled") == [a1["id"], a2["id"]]
    assert ids(client_id=c2["id"]) == [a3["id"]]
    assert ids(start_date="2026-11-04", end_date="2026-11-30") == [a2["id"]]
    assert ids(start_date="2026-11-10") == [a2["id"], a3["id"]]


def test_update_reattaches_client_and_detaches_property(api, broker):
    h = broker["headers"]
    c1 = _client(api, h)
    c2 = _client(api, h, first_name="Nora", last_name="Seller", phone="+15550199999")
    p = _property(api, h)
    a = _book(api, h, c1["id"], p["id"])

    r = api.put(f"/api/appointments/{a['id']}", headers=h, json={"client_id": c2["id"], "time": "16:45"})
    assert r.status_code == 200
    body = r.json()
    assert body["client_id"] == c2["id"]
    assert body["client_name"] == "Nora Seller"
    assert body["client_phone"] == "+15550199999"
    assert body["time"] == "16:45"
    assert body["property_id"] == p["id"]

    r = api.put(f"/api/appointments/{a['id']}", headers=h, json={"property_id": ""})
    assert r.status_code == 200
    assert r.json()["property_id"] is None
    assert r.json()["property_address"] is None


def test_update_with_foreign_client_leaves_row_unchanged(api, broker, other_broker):
    h = broker["headers"]
    c = _client(api, h)
    a = _book(api, h, c["id"])
    theirs = _client(api, other_broker["headers"])

    r = api.put(f"/api/appointments/{a['id']}", headers=h, json={"client_id": theirs["id"], "title": "Changed title"})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_reference"

    again = api.get(f"/api/appointments/{a['id']}", headers=h).json()
    assert again["client_id"] == c["id"]
    assert again["title"] == a["title"]


def test_delete_appointment(api, broker):
    h = broker["headers"]
    c = _client(api, h)
    a = _book(api, h, c["id"])

    assert api.delete(f"/api/appointments/{a['id']}", headers=h).json() == {"ok": True}
    assert api.get(f"/api/appointments/{a['id']}", headers=h).status_code == 404


def test_stats_counts_month_today_status_and_type(api, db, broker, other_broker):
    h = broker["headers"]
    c = _client(api, h)
    _book(api, h, c["id"], date="2026-11-01", type="site_visit")
    _book(api, h, c["id"], date="2026-11-15", type="call")
    _book(api, h, c["id"], date="2026-11-15", type="call")
    last = _book(api, h, c["id"], date="2026-11-30", type="meeting")
    _book(api, h, c["id"], date="2026-12-01", type="meeting")
    _book(api, h, c["id"], date="2026-10-31", type="meeting")
    api.put(f"/api/appointments/{last['id']}", headers=h, json={"status": "completed"})

    theirs = _client(api, other_broker["headers"])
    _book(api, other_broker["headers"], theirs["id"], date="2026-11-15")

    stats = appointment_stats(db, owner_id=broker["user"]["id"], today=date(2026, 11, 15))
    assert stats.total_this_month == 4
    assert stats.today_appointments == 2
    assert stats.scheduled_appointments == 5
    assert stats.completed_appointments == 1
    assert stats.cancelled_appointments == 0
    assert stats.appointments_by_type == {"site_visit": 1, "call": 2, "meeting": 3}


def test_stats_endpoint_shape(api, broker):
    r = api.get("/api/appointments/stats", headers=broker["headers"])
    assert r.status_code == 200
    assert r.json() == {
        "total_this_month": 0,
        "today_appointments": 0,
        "scheduled_appointments": 0,
        "completed_appointments": 0,
        "cancelled_appointments": 0,
        "appointments_by_type": {},
    }


@pytest.mark.parametrize(
    "field,value",
    [
        ("time", "10:30:45"),
        ("time", "1030"),
        ("time", 37800),
        ("date", 20261103),
        ("date", "2026-11-03T10:30:00"),
    ],
)
def test_date_and_time_must_match_the_returned_format(api, broker, field, value):
    c = _client(api, broker["headers"])
    r = api.post("/api/appointments", headers=broker["headers"], json=appointment_payload(c["id"], **{field: value}))
    assert r.status_code == 400
    assert r.json()["detail"].startswith(f"{field}:")


def test_update_time_with_seconds_is_rejected(api, broker):
    h = broker["headers"]
    c = _client(api, h)
    a = _book(api, h, c["id"])

    r = api.put(f"/api/appointments/{a['id']}", headers=h, json={"time": "16:45:10"})
    assert r.status_code == 400
    assert api.get(f"/api/appointments/{a['id']}", headers=h).json()["time"] == "10:30"
