import logging

import pytest

from pantrix.core import store as keys
from pantrix.core.state import DuplicateIdError, ValidationError, ensure_unique
from pantrix.db.models import (
    CookedFoodOrder,
    DeliveryPerson,
    DonationRequest,
    FoodBankProfile,
    HotelProfile,
    InventoryItem,
    PublicProfile,
)


def test_login_public_uses_default_profile(state):
    profile = state.login_public("Asha", "asha@example.com", "India")
    assert state.user_type() == "public"
    assert state.current_page() == "pantry"
    assert state.public_view() == "dashboard"
    stored = state.active_profile()
    assert stored == profile
    assert (stored.weight, stored.weight_unit, stored.height, stored.height_unit) == (70, "kg", 175, "cm")
    assert stored.preferences == ["Vegetarian"]


def test_login_requires_name_and_email(state):
    with pytest.raises(ValidationError) as exc:
        state.login_public("  ", "asha@example.com", "India")
    assert exc.value.field == "name"
    assert state.user_type() is None


def test_demo_hotel_login_gets_donation_history(state):
    state.login_hotel("The Grand Eatery", "New York, USA", "manager@example.com")
    assert state.donation_count() == 12
    assert state.membership_tier() == "Gold"


def test_other_hotel_login_keeps_counter(state):
    state.save_donation_count(3)
    state.login_hotel("Sunset Bistro", "Los Angeles, USA", "chef@sunset.example")
    assert state.donation_count() == 3
    assert state.membership_tier() == "Silver"


def test_hotel_sign_up_resets_counter(state):
    state.save_donation_count(30)
    profile = state.sign_up_hotel(HotelProfile(id="", name="Ocean's Catch", location="Miami, USA",
                                               email="hello@oceans.example", cuisine_type="Seafood"))
    assert profile.id.startswith("hotel-")
    assert state.donation_count() == 0
    assert state.membership_tier() is None
    assert state.current_page() == "hotel-pantry"


def test_membership_tier_only_for_hotels(state):
    state.save_donation_count(30)
    state.login_food_bank("City Harvest", "New York, USA", "ops@cityharvest.example", "MH/2017/0123")
    assert state.membership_tier() is None
    assert state.active_profile().darpan_id == "MH/2017/0123"
    assert state.current_page() == "food-bank-dashboard"


def test_update_profile_replaces_active_role(state):
    original = state.login_public("Asha", "asha@example.com", "India")
    updated = PublicProfile(id="", name="Asha R", email="asha@example.com", country="India",
                            weight=150, weight_unit="lbs", preferences=["Vegan", "Spicy"])
    state.update_profile(updated)
    stored = state.active_profile()
    assert stored.id == original.id
    assert stored.name == "Asha R"
    assert stored.preferences == ["Vegan", "Spicy"]


def test_update_profile_rejects_other_role(state):
    state.login_public("Asha", "asha@example.com", "India")
    with pytest.raises(ValidationError):
        state.update_profile(FoodBankProfile(id="fb-1", name="Imposter", location="X", email="x@example.com"))


def test_logout_clears_session_but_keeps_shared_slices(hotel):
    state = hotel
    state.save_inventory([InventoryItem(id="i1", name="Milk", expiry_date="2024-07-20", quantity="1", category="Dairy")])
    state.save_donation_count(5)
    shared = {
        keys.DONATION_REQUESTS: [{"id": "don-1", "restaurant_name": "R", "location": "L", "items": []}],
        keys.NOTIFICATIONS: [{"id": "n-1", "type": "new_requirement", "title": "t", "message": "m",
                              "timestamp": "2024-07-15T10:00:00", "read": False}],
        keys.REQUIREMENT_REQUESTS: [{"id": "req-1", "food_bank_name": "F", "food_bank_location": "L",
                                     "requested_items": ["Rice"], "message": "", "timestamp": "t"}],
        keys.COOKED_FOOD: [{"id": "c-1", "name": "Rice", "description": "", "quantity": "1",
                            "available_until": "21:00", "hotel_name": "H", "hotel_location": "L",
                            "hotel_id": "h-1"}],
        keys.COOKED_FOOD_ORDERS: [],
    }
    for key, value in shared.items():
        state.store.set(key, value)

    state.logout()

    assert state.current_page() == "welcome"
    assert state.user_type() is None
    assert state.active_profile() is None
    assert state.profile("hotel") is None
    assert state.inventory() == []
    assert state.donation_count() == 0
    assert state.shopping_list() == []
    assert state.waste_hotspots() == []
    for key, value in shared.items():
        assert state.store.get(key) == value


def test_navigation_rejects_unknown_values(state):
    state.set_current_page("edit-profile")
    assert state.current_page() == "edit-profile"
    with pytest.raises(ValidationError):
        state.set_current_page("admin")
    with pytest.raises(ValidationError):
        state.set_public_view("flash_donations")
    with pytest.raises(ValidationError):
        state.set_language("xx")
    state.set_language("ta")
    assert state.language() == "ta"


def test_malformed_records_are_skipped(state):
    state.store.set(keys.INVENTORY, [
        {"id": "ok", "name": "Milk", "expiry_date": "2024-07-20", "quantity": "1", "category": "Dairy"},
        {"id": "broken"},
        "not a record",
    ])
    assert [i.id for i in state.inventory()] == ["ok"]


def test_ensure_unique():
    items = [InventoryItem(id="i1", name="Milk", expiry_date="2024-07-20", quantity="1", category="Dairy")]
    ensure_unique("inventory", items, "i2")
    with pytest.raises(DuplicateIdError):
        ensure_unique("inventory", items, "i1")


def test_nested_records_survive_a_reload(state):
    request = DonationRequest(
        id="don-1", restaurant_name="The Grand Eatery", location="New York, USA",
        items=[InventoryItem(id="i1", name="Bread", expiry_date="2024-07-16", quantity="20 Loaves", category="Bakery")],
        status="completed", donation_date="2024-07-15", ngo_name="City Harvest",
        delivery_type="pickup", pickup_date_time="2024-07-16T10:30",
    )
    order = CookedFoodOrder(
        id="order-1", order_id="PANTRIX-AB12CD", food_item_id="c-1", food_item_name="Dal Makhani",
        hotel_id="hotel-1", hotel_name="Sunset Bistro", hotel_location="Los Angeles, USA",
        ordered_by="Asha", ordered_by_id="public-1", user_type="public",
        delivery_address="1 Sunset Blvd", contact_number="555-0100",
        order_timestamp="2024-07-15T19:00:00", status="out_for_delivery",
        delivery_person=DeliveryPerson(name="Ravi Kumar", phone="555-0199"),
        estimated_delivery_time="2024-07-15T19:15:00",
    )
    state.save_donation_requests([request])
    state.save_cooked_food_orders([order])

    assert state.donation_requests() == [request]
    assert isinstance(state.donation_requests()[0].items[0], InventoryItem)
    assert state.cooked_food_orders() == [order]
    assert isinstance(state.cooked_food_orders()[0].delivery_person, DeliveryPerson)


def test_collection_slice_of_wrong_type_reads_as_empty(state, caplog):
    state.store.set(keys.INVENTORY, 5)
    state.store.set(keys.DONATION_REQUESTS, {"id": "don-1"})
    with caplog.at_level(logging.WARNING, logger="pantrix.core.state"):
        assert state.inventory() == []
        assert state.donation_requests() == []
    assert "expected a list" in caplog.text


def test_profile_slice_of_wrong_type_is_discarded(hotel):
    hotel.store.set(keys.HOTEL_PROFILE, "garbage")
    assert hotel.active_profile() is None
    hotel.store.set(keys.HOTEL_PROFILE, [1, 2])
    assert hotel.profile("hotel") is None
