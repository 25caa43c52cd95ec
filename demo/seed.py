"""Seed the shared demo data if it's missing."""
from pantrix.core import store as keys
from pantrix.core.state import AppState
from pantrix.db.models import CookedFoodItem, DonationRequest, InventoryItem


def _item(id, name, expiry_date, quantity, category):
    return InventoryItem(id=id, name=name, expiry_date=expiry_date, quantity=quantity, category=category)


INITIAL_DONATION_REQUESTS = [
    DonationRequest(id="don-16222", restaurant_name="The Grand Eatery", location="New York, USA", items=[
        _item("d1-1", "Potatoes", "2024-07-20", "20 lbs", "Produce"),
        _item("d1-2", "Onions", "2024-07-25", "10 lbs", "Produce"),
    ], status="pending"),
    DonationRequest(id="don-16333", restaurant_name="Sunset Bistro", location="Los Angeles, USA", items=[
        _item("d2-1", "Chicken Breast", "2024-07-18", "30 lbs", "Meat"),
    ], status="pending"),
    DonationRequest(id="don-16444", restaurant_name="The Grand Eatery", location="New York, USA", items=[
        _item("d3-1", "Milk", "2024-05-15", "10 Gallons", "Dairy"),
    ], status="completed", donation_date="2024-05-10"),
    DonationRequest(id="don-16555", restaurant_name="Ocean's Catch", location="Miami, USA", items=[
        _item("d4-1", "Fish Fillets", "2024-07-19", "15 lbs", "Meat"),
    ], status="accepted"),
    DonationRequest(id="don-16666", restaurant_name="The Grand Eatery", location="New York, USA", items=[
        _item("d5-1", "Bread", "2024-04-25", "15 Loaves", "Bakery"),
        _item("d5-2", "Cheese", "2024-05-10", "5 lbs", "Dairy"),
    ], status="completed", donation_date="2024-04-22"),
    DonationRequest(id="don-16777", restaurant_name="Sunset Bistro", location="Los Angeles, USA", items=[
        _item("d6-1", "Tomatoes", "2024-05-05", "25 lbs", "Produce"),
    ], status="completed", donation_date="2024-05-01"),
    DonationRequest(id="don-16888", restaurant_name="Mountain View Grill", location="Denver, USA", items=[
        _item("d7-1", "Steak", "2024-07-17", "40 lbs", "Meat"),
    ], status="pending"),
]

DEMO_COOKED_FOOD = [
    CookedFoodItem(
        id="cooked-demo-1",
        name="Paneer Butter Masala",
        description="Freshly made paneer in a rich tomato and butter gravy. Perfect with naan or rice.",
        quantity="3",
        allergens="Dairy, Nuts",
        available_until="21:00",
        hotel_name="The Grand Eatery",
        hotel_location="New York, USA",
        hotel_id="hotel-demo-1",
    ),
    CookedFoodItem(
        id="cooked-demo-2",
        name="Vegetable Fried Rice",
        description="A generous portion of fried rice with mixed vegetables, enough for a small family.",
        quantity="4",
        available_until="22:00",
        hotel_name="Sunset Bistro",
        hotel_location="Los Angeles, USA",
        hotel_id="hotel-demo-2",
    ),
]


def seed_cooked_food(state: AppState) -> bool:
    """Put the demo dishes on offer if nothing has been announced yet."""
    if state.cooked_food_items():
        return False
    state.save_cooked_food_items(list(DEMO_COOKED_FOOD))
    return True


def seed_if_empty(state: AppState = None) -> bool:
    """Seed the starter donation requests if the slice has never been written."""
    state = state or AppState()
    if keys.DONATION_REQUESTS in state.store.keys():
        return False  # Already seeded
    state.save_donation_requests(list(INITIAL_DONATION_REQUESTS))
    return True
