def _login_hotel(client, email="chef@grandeatery.example"):
    client.post("/session/login/hotel", data={
        "name": "The Grand Eatery", "location": "New York, USA", "email": email,
    })


def test_seeded_requests_listed(client):
    resp = client.get("/donations")
    assert resp.status_code == 200
    ids = [r["id"] for r in resp.json()]
    assert ids[0] == "don-16222"
    assert len(ids) == 7
    pending = client.get("/donations?status=pending").json()
    assert {r["id"] for r in pending} == {"don-16222", "don-16333", "don-16888"}


def test_unknown_status_filter(client):
    assert client.get("/donations?status=lost").status_code == 422


def test_create_donation_request(client):
    _login_hotel(client)
    items = client.get("/inventory").json()
    chosen = [items[0]["id"], items[1]["id"]]
    resp = client.post("/donations", data={
        "item_ids": chosen, "ngo_name": "City Harvest", "delivery_type": "pickup",
        "pickup_date": "2024-07-16", "pickup_time": "10:30", "notes": "Loading dock",
    })
    assert resp.status_code == 200
    request = resp.json()
    assert request["status"] == "pending"
    assert request["pickup_date_time"] == "2024-07-16T10:30"
    assert [i["id"] for i in request["items"]] == chosen
    remaining = {i["id"] for i in client.get("/inventory").json()}
    assert remaining.isdisjoint(chosen)
    assert len(remaining) == 10
    assert client.get("/session").json()["donation_count"] == 1
    assert client.get("/donations").json()[0]["id"] == request["id"]


def test_create_with_unknown_item_changes_nothing(client):
    _login_hotel(client)
    resp = client.post("/donations", data={"item_ids": ["item-nope"], "ngo_name": "City Harvest"})
    assert resp.status_code == 422
    assert len(client.get("/inventory").json()) == 12
    assert client.get("/session").json()["donation_count"] == 0


def test_lifecycle_and_illegal_transitions(client):
    assert client.post("/donations/don-16222/complete").status_code == 409
    assert client.post("/donations/don-16222/accept").json()["status"] == "accepted"
    resp = client.post("/donations/don-16222/complete")
    assert resp.json()["status"] == "completed"
    assert resp.json()["donation_date"]
    assert client.post("/donations/don-16333/decline").json()["status"] == "declined"
    assert client.post("/donations/don-16333/accept").status_code == 409
    assert client.post("/donations/don-missing/accept").status_code == 404


def test_history_for_hotel(client):
    _login_hotel(client)
    history = client.get("/donations/history").json()
    assert [r["id"] for r in history] == ["don-16444", "don-16666"]


def test_history_needs_hotel(client):
    assert client.get("/donations/history").status_code == 422
