import json
from datetime import date

from pantrix.core import session_data
from pantrix.core import store as keys
from pantrix.core.state import AppState
from pantrix.db.models import DonationRequest, GeoLocation

TODAY = date(2024, 7, 15)

HOTSPOTS = {"hotspots": [
    {"name": "The Lavish Buffet", "address": "101 City Center", "latitude": 40.758, "longitude": -73.9855,
     "waste_score": 9, "contact_email": "mgr@lavish.example", "contact_phone": "555-0101"},
    {"name": "Harborview Hotel", "address": "505 Waterfront Pl", "latitude": 40.705, "longitude": -74.009,
     "waste_score": 7, "contact_email": "events@harborview.example", "contact_phone": "555-0105"},
]}

NAMES = {"names": ["Alpha Diner", "Beta Grill", "Gamma Cafe", "Delta Bistro", "Epsilon Eats", "Zeta Kitchen", "Eta Bar"]}


def _fenced(data):
    return "```json\n" + json.dumps(data) + "\n```"


def test_populate_food_bank_data(food_bank: AppState, fake_ai):
    fake_ai.replies["food waste hotspots"] = _fenced(HOTSPOTS)
    fake_ai.replies["names for a restaurant"] = _fenced(NAMES)
    existing = [r.id for r in food_bank.donation_requests()]

    assert session_data.populate_food_bank_data(food_bank, TODAY) is True

    requests = food_bank.donation_requests()
    generated = requests[:7]
    assert [r.restaurant_name for r in generated] == NAMES["names"]
    assert [r.status for r in generated] == [
        "pending", "accepted", "completed", "pending", "pending", "accepted", "pending",
    ]
    assert generated[2].donation_date == "2024-07-10"
    assert all(r.location == "New York, USA" for r in generated)
    assert [i.name for i in generated[0].items] == ["Potatoes", "Carrots"]
    assert generated[6].items[0].name == "Potatoes"
    assert [r.id for r in requests[7:]] == existing

    hotspots = food_bank.waste_hotspots()
    assert [h.name for h in hotspots] == ["The Lavish Buffet", "Harborview Hotel"]
    assert len({h.id for h in hotspots}) == 2


def test_populate_runs_once(food_bank, fake_ai):
    fake_ai.replies["food waste hotspots"] = _fenced(HOTSPOTS)
    fake_ai.replies["names for a restaurant"] = _fenced(NAMES)
    session_data.populate_food_bank_data(food_bank, TODAY)
    count = len(food_bank.donation_requests())
    assert session_data.populate_food_bank_data(food_bank, TODAY) is False
    assert len(food_bank.donation_requests()) == count


def test_populate_uses_demo_data_offline(food_bank, fake_ai):
    assert session_data.populate_food_bank_data(food_bank, TODAY) is True
    assert len(food_bank.waste_hotspots()) == 5
    assert food_bank.donation_requests()[0].restaurant_name == "The Grand Eatery"


def test_populate_only_for_food_banks(hotel, fake_ai):
    assert session_data.populate_food_bank_data(hotel, TODAY) is False
    assert fake_ai.prompts == []


def test_geocode_active_profile(hotel, fake_ai):
    fake_ai.replies["latitude and longitude"] = _fenced({"latitude": 40.71, "longitude": -74.0})
    profile = session_data.geocode_active_profile(hotel)
    assert (profile.latitude, profile.longitude) == (40.71, -74.0)
    assert hotel.active_profile().latitude == 40.71
    assert session_data.geocode_active_profile(hotel) is None
    assert len(fake_ai.prompts) == 1


def test_public_users_are_not_geocoded(state, fake_ai):
    state.login_public("Asha", "asha@example.com", "India")
    assert session_data.geocode_active_profile(state) is None


def test_late_geocode_after_logout_is_discarded(hotel, monkeypatch):
    def geocode_then_logout(address):
        hotel.logout()
        return GeoLocation(latitude=1.0, longitude=2.0)

    monkeypatch.setattr(session_data.ai_assistant, "geocode", geocode_then_logout)
    assert session_data.geocode_active_profile(hotel) is None
    assert hotel.store.get(keys.HOTEL_PROFILE) is None
    assert hotel.active_profile() is None


def test_late_geocode_for_a_replaced_session_is_discarded(hotel, monkeypatch):
    def geocode_then_switch(address):
        hotel.login_hotel("Sunset Bistro", "Los Angeles, USA", "chef@sunset.example")
        return GeoLocation(latitude=1.0, longitude=2.0)

    monkeypatch.setattr(session_data.ai_assistant, "geocode", geocode_then_switch)
    assert session_data.geocode_active_profile(hotel) is None
    assert hotel.active_profile().name == "Sunset Bistro"
    assert hotel.active_profile().latitude is None


def test_late_food_bank_data_after_logout_is_discarded(food_bank, fake_ai, monkeypatch):
    def hotspots_then_logout(location):
        food_bank.logout()
        return [dict(h) for h in HOTSPOTS["hotspots"]]

    monkeypatch.setattr(session_data.ai_assistant, "list_waste_hotspots", hotspots_then_logout)
    assert session_data.populate_food_bank_data(food_bank, TODAY) is False
    assert food_bank.waste_hotspots() == []
    assert food_bank.donation_requests() == []


def test_second_food_bank_session_replaces_sample_requests(food_bank, fake_ai):
    fake_ai.replies["food waste hotspots"] = _fenced(HOTSPOTS)
    fake_ai.replies["names for a restaurant"] = _fenced(NAMES)
    session_data.populate_food_bank_data(food_bank, TODAY)
    first = len(food_bank.donation_requests())

    food_bank.logout()
    food_bank.login_food_bank("City Harvest", "New York, USA", "ops@cityharvest.example")
    assert session_data.populate_food_bank_data(food_bank, TODAY) is True

    requests = food_bank.donation_requests()
    assert len(requests) == first == 7
    assert all(r.id.startswith("gen-don-") for r in requests)


def test_sample_batch_keeps_real_requests(food_bank, fake_ai):
    fake_ai.replies["food waste hotspots"] = _fenced(HOTSPOTS)
    fake_ai.replies["names for a restaurant"] = _fenced(NAMES)
    food_bank.save_donation_requests([
        DonationRequest(id="don-real", restaurant_name="Sunset Bistro", location="Los Angeles, USA"),
    ])
    session_data.populate_food_bank_data(food_bank, TODAY)
    food_bank.logout()
    food_bank.login_food_bank("City Harvest", "New York, USA", "ops@cityharvest.example")
    session_data.populate_food_bank_data(food_bank, TODAY)
    requests = food_bank.donation_requests()
    assert len(requests) == 8
    assert requests[-1].id == "don-real"
