"""Background data for a freshly signed-in hotel or food bank.

geocode_active_profile() fills in map coordinates for the signed-in hotel or
food bank.  populate_food_bank_data() gives a new food bank something to look
at: sample donation requests from nearby restaurants plus waste hotspots for
its map.  Both go through the AI request layer and are no-ops when there is
nothing to do.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from pantrix.core import ai_assistant
from pantrix.core.state import AppState, Profile, new_id
from pantrix.db.models import DonationRequest, FoodBankProfile, HotelProfile, InventoryItem, WasteHotspot

LOGGER = logging.getLogger(__name__)

# id prefix of generated sample requests; each load replaces the previous batch
GENERATED_PREFIX = "gen-don"

SAMPLE_STATUSES = ("pending", "accepted", "completed", "pending", "pending", "accepted")

# (name, days from today, quantity, category) per sample request
SAMPLE_ITEM_POOL = [
    [("Potatoes", 2, "20 lbs", "Produce"), ("Carrots", 3, "15 lbs", "Produce")],
    [("Chicken Thighs", 1, "30 lbs", "Meat")],
    [("Baguettes", 0, "25 loaves", "Bakery")],
    [("Cheddar Cheese", 5, "10 lbs", "Dairy")],
    [("Ground Beef", 1, "22 lbs", "Meat")],
    [("Lettuce Heads", 2, "15 heads", "Produce")],
]


def _still_signed_in(state: AppState, profile: Profile) -> bool:
    """False once the session that started a remote call has ended or switched."""
    current = state.active_profile()
    if current is None or current.user_type != profile.user_type or current.id != profile.id:
        LOGGER.info("Discarding late result for %s: session changed", profile.name)
        return False
    return True


def geocode_active_profile(state: AppState) -> Optional[Profile]:
    """Add latitude/longitude to the signed-in hotel or food bank profile.

    Returns the updated profile, or None when nothing needed geocoding.
    Raises RemoteCallError if the location cannot be resolved.
    """
    profile = state.active_profile()
    if not isinstance(profile, (HotelProfile, FoodBankProfile)):
        return None
    if profile.latitude is not None or not profile.location:
        return None
    coords = ai_assistant.geocode(profile.location)
    if not _still_signed_in(state, profile):
        return None
    profile = state.active_profile()
    profile.latitude = coords.latitude
    profile.longitude = coords.longitude
    state.save_profile(profile)
    LOGGER.info("Geocoded %s to (%s, %s)", profile.location, coords.latitude, coords.longitude)
    return profile


def sample_donation_requests(restaurant_names: list[str], location: str, today: date) -> list[DonationRequest]:
    requests = []
    for index, restaurant in enumerate(restaurant_names):
        status = SAMPLE_STATUSES[index % len(SAMPLE_STATUSES)]
        items = [
            InventoryItem(
                id=new_id("item"),
                name=name,
                expiry_date=(today + timedelta(days=offset)).isoformat(),
                quantity=quantity,
                category=category,
            )
            for name, offset, quantity, category in SAMPLE_ITEM_POOL[index % len(SAMPLE_ITEM_POOL)]
        ]
        request = DonationRequest(
            id=new_id(GENERATED_PREFIX),
            restaurant_name=restaurant,
            location=location,
            items=items,
            status=status,
        )
        if status == "completed":
            request.donation_date = (today - timedelta(days=index * 2 + 1)).isoformat()
        requests.append(request)
    return requests


def populate_food_bank_data(state: AppState, today: date = None) -> bool:
    """Load sample requests and waste hotspots for a food bank that has none.

    Returns True when data was added.
    """
    profile = state.active_profile()
    if not isinstance(profile, FoodBankProfile) or not profile.location:
        return False
    if state.waste_hotspots():
        return False

    today = today or date.today()
    restaurant_names = ai_assistant.list_business_names(profile.location, "restaurant")
    hotspot_data = ai_assistant.list_waste_hotspots(profile.location)

    generated = sample_donation_requests(restaurant_names, profile.location, today)
    hotspots = [WasteHotspot(id=new_id("hotspot"), **h) for h in hotspot_data]

    if not _still_signed_in(state, profile) or state.waste_hotspots():
        return False
    kept = [r for r in state.donation_requests() if not r.id.startswith(GENERATED_PREFIX + "-")]
    state.save_donation_requests(generated + kept)
    state.save_waste_hotspots(hotspots)
    LOGGER.info(
        "Loaded %d sample requests and %d hotspots for %s",
        len(generated), len(hotspots), profile.name,
    )
    return True
