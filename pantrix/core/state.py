"""Application state — the injected object every handler works through.

AppState wraps a PersistentStore and exposes one typed load/save pair per
slice, converting between stored JSON dicts and the dataclasses in
db/models.py.  Session handling (sign-up, login, profile edit, logout)
lives here too because it only touches session slices.

Handlers never hold collections between calls: they load a slice, build a
new list, and save the whole list back.
"""

import logging
import uuid
from typing import Optional, Union

from pantrix.core import store as keys
from pantrix.core.derived import membership_tier
from pantrix.core.store import PersistentStore
from pantrix.db.models import (
    PROFILE_TYPES,
    CookedFoodItem,
    CookedFoodOrder,
    DonationRequest,
    FoodBankProfile,
    HotelProfile,
    InventoryItem,
    Notification,
    PublicProfile,
    RequirementRequest,
    ShoppingListItem,
    WasteHotspot,
)

LOGGER = logging.getLogger(__name__)

PAGES = (
    "welcome", "public-signup", "public-login", "hotel-login", "hotel-signup",
    "food-bank-login", "food-bank-signup", "pantry", "hotel-pantry",
    "food-bank-dashboard", "edit-profile",
)
PUBLIC_VIEWS = ("dashboard", "inventory", "healthbot", "shopping-list", "knowledge", "my_orders")
HOTEL_VIEWS = ("dashboard", "inventory", "flash_donations")
USER_TYPES = ("public", "hotel", "food-bank")
LANGUAGES = ("en", "es", "hi", "fr", "de", "ta")

# The demo hotel account starts with a donation history.
DEMO_HOTEL_EMAIL = "manager@example.com"
DEMO_HOTEL_DONATIONS = 12

Profile = Union[PublicProfile, HotelProfile, FoodBankProfile]

_PROFILE_KEYS = {
    "public": keys.USER_PROFILE,
    "hotel": keys.HOTEL_PROFILE,
    "food-bank": keys.FOOD_BANK_PROFILE,
}


class ValidationError(Exception):
    """Raised when a form submission is missing or has invalid fields."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)


class DuplicateIdError(Exception):
    """Raised when a record's id already exists in its collection."""

    def __init__(self, collection: str, record_id: str) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"Duplicate id '{record_id}' in {collection}")


def new_id(prefix: str) -> str:
    """Return a collection-unique id such as 'don-3f9c1a2b7d4e'."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def require(value, field: str, label: str = None) -> str:
    """Return value stripped, or raise ValidationError if it is blank."""
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValidationError(f"{label or field} is required.", field=field)
    return text


def ensure_unique(collection: str, records: list, record_id: str) -> None:
    if any(r.id == record_id for r in records):
        raise DuplicateIdError(collection, record_id)


class AppState:
    """Typed access to every persisted slice."""

    def __init__(self, store: PersistentStore = None) -> None:
        self.store = store if store is not None else PersistentStore()

    # ── Collections ───────────────────────────────────────────────────────────

    def _load_list(self, key: str, cls) -> list:
        stored = self.store.get(key, []) or []
        if not isinstance(stored, list):
            LOGGER.warning("Ignoring %s: expected a list, got %r", key, stored)
            return []
        records = []
        for raw in stored:
            try:
                records.append(cls.from_dict(raw))
            except (TypeError, AttributeError, KeyError):
                LOGGER.warning("Skipping malformed %s record in %s: %r", cls.__name__, key, raw)
        return records

    def _save_list(self, key: str, records: list) -> None:
        self.store.set(key, records)

    def inventory(self) -> list[InventoryItem]:
        return self._load_list(keys.INVENTORY, InventoryItem)

    def save_inventory(self, items: list[InventoryItem]) -> None:
        self._save_list(keys.INVENTORY, items)

    def donation_requests(self) -> list[DonationRequest]:
        return self._load_list(keys.DONATION_REQUESTS, DonationRequest)

    def save_donation_requests(self, requests: list[DonationRequest]) -> None:
        self._save_list(keys.DONATION_REQUESTS, requests)

    def cooked_food_items(self) -> list[CookedFoodItem]:
        return self._load_list(keys.COOKED_FOOD, CookedFoodItem)

    def save_cooked_food_items(self, items: list[CookedFoodItem]) -> None:
        self._save_list(keys.COOKED_FOOD, items)

    def cooked_food_orders(self) -> list[CookedFoodOrder]:
        return self._load_list(keys.COOKED_FOOD_ORDERS, CookedFoodOrder)

    def save_cooked_food_orders(self, orders: list[CookedFoodOrder]) -> None:
        self._save_list(keys.COOKED_FOOD_ORDERS, orders)

    def requirement_requests(self) -> list[RequirementRequest]:
        return self._load_list(keys.REQUIREMENT_REQUESTS, RequirementRequest)

    def save_requirement_requests(self, requests: list[RequirementRequest]) -> None:
        self._save_list(keys.REQUIREMENT_REQUESTS, requests)

    def notifications(self) -> list[Notification]:
        return self._load_list(keys.NOTIFICATIONS, Notification)

    def save_notifications(self, notifications: list[Notification]) -> None:
        self._save_list(keys.NOTIFICATIONS, notifications)

    def shopping_list(self) -> list[ShoppingListItem]:
        return self._load_list(keys.SHOPPING_LIST, ShoppingListItem)

    def save_shopping_list(self, items: list[ShoppingListItem]) -> None:
        self._save_list(keys.SHOPPING_LIST, items)

    def waste_hotspots(self) -> list[WasteHotspot]:
        return self._load_list(keys.WASTE_HOTSPOTS, WasteHotspot)

    def save_waste_hotspots(self, hotspots: list[WasteHotspot]) -> None:
        self._save_list(keys.WASTE_HOTSPOTS, hotspots)

    # ── Scalars ───────────────────────────────────────────────────────────────

    def donation_count(self) -> int:
        value = self.store.get(keys.DONATION_COUNT, 0)
        return value if isinstance(value, int) else 0

    def save_donation_count(self, count: int) -> None:
        self.store.set(keys.DONATION_COUNT, count)

    def user_type(self) -> Optional[str]:
        value = self.store.get(keys.USER_TYPE, None)
        return value if value in USER_TYPES else None

    def current_page(self) -> str:
        value = self.store.get(keys.CURRENT_PAGE, "welcome")
        return value if value in PAGES else "welcome"

    def set_current_page(self, page: str) -> None:
        if page not in PAGES:
            raise ValidationError(f"Unknown page '{page}'.", field="page")
        self.store.set(keys.CURRENT_PAGE, page)

    def public_view(self) -> str:
        value = self.store.get(keys.PUBLIC_VIEW, "dashboard")
        return value if value in PUBLIC_VIEWS else "dashboard"

    def set_public_view(self, view: str) -> None:
        if view not in PUBLIC_VIEWS:
            raise ValidationError(f"Unknown view '{view}'.", field="view")
        self.store.set(keys.PUBLIC_VIEW, view)

    def hotel_view(self) -> str:
        value = self.store.get(keys.HOTEL_VIEW, "dashboard")
        return value if value in HOTEL_VIEWS else "dashboard"

    def set_hotel_view(self, view: str) -> None:
        if view not in HOTEL_VIEWS:
            raise ValidationError(f"Unknown view '{view}'.", field="view")
        self.store.set(keys.HOTEL_VIEW, view)

    def language(self) -> str:
        value = self.store.get(keys.LANGUAGE, "en")
        return value if value in LANGUAGES else "en"

    def set_language(self, language: str) -> None:
        if language not in LANGUAGES:
            raise ValidationError(f"Unsupported language '{language}'.", field="language")
        self.store.set(keys.LANGUAGE, language)

    # ── Profiles ──────────────────────────────────────────────────────────────

    def profile(self, user_type: str) -> Optional[Profile]:
        raw = self.store.get(_PROFILE_KEYS[user_type], None)
        if not raw:
            return None
        try:
            return PROFILE_TYPES[user_type].from_dict(raw)
        except (TypeError, AttributeError):
            LOGGER.warning("Discarding malformed %s profile: %r", user_type, raw)
            return None

    def active_profile(self) -> Optional[Profile]:
        user_type = self.user_type()
        return self.profile(user_type) if user_type else None

    def save_profile(self, profile: Profile) -> None:
        self.store.set(_PROFILE_KEYS[profile.user_type], profile)

    def membership_tier(self) -> Optional[str]:
        """Tier badge for the signed-in hotel; other roles have none."""
        if self.user_type() != "hotel":
            return None
        return membership_tier(self.donation_count())

    # ── Session ───────────────────────────────────────────────────────────────

    def _start_session(self, profile: Profile, page: str) -> None:
        self.store.set(keys.USER_TYPE, profile.user_type)
        self.save_profile(profile)
        self.store.set(keys.CURRENT_PAGE, page)
        LOGGER.info("Started %s session for %s", profile.user_type, profile.name)

    def sign_up_public(self, profile: PublicProfile) -> PublicProfile:
        require(profile.name, "name", "Name")
        require(profile.email, "email", "Email")
        if not profile.id:
            profile.id = new_id("user")
        self._start_session(profile, "pantry")
        self.store.set(keys.PUBLIC_VIEW, "dashboard")
        return profile

    def login_public(self, name: str, email: str, location: str) -> PublicProfile:
        profile = PublicProfile(
            id=new_id("user"),
            name=require(name, "name", "Name"),
            email=require(email, "email", "Email"),
            country=(location or "").strip(),
            preferences=["Vegetarian"],
        )
        return self.sign_up_public(profile)

    def sign_up_hotel(self, profile: HotelProfile) -> HotelProfile:
        require(profile.name, "name", "Hotel name")
        require(profile.location, "location", "Location")
        require(profile.email, "email", "Email")
        profile.id = new_id("hotel")
        self._start_session(profile, "hotel-pantry")
        self.store.set(keys.HOTEL_VIEW, "dashboard")
        self.save_donation_count(0)
        return profile

    def login_hotel(self, name: str, location: str, email: str) -> HotelProfile:
        profile = HotelProfile(
            id=new_id("hotel"),
            name=require(name, "name", "Hotel name"),
            location=require(location, "location", "Location"),
            email=require(email, "email", "Email"),
        )
        self._start_session(profile, "hotel-pantry")
        self.store.set(keys.HOTEL_VIEW, "dashboard")
        if profile.email == DEMO_HOTEL_EMAIL and self.donation_count() == 0:
            self.save_donation_count(DEMO_HOTEL_DONATIONS)
        return profile

    def sign_up_food_bank(self, profile: FoodBankProfile) -> FoodBankProfile:
        require(profile.name, "name", "Food bank name")
        require(profile.location, "location", "Location")
        require(profile.email, "email", "Email")
        profile.id = new_id("fb")
        self._start_session(profile, "food-bank-dashboard")
        return profile

    def login_food_bank(self, name: str, location: str, email: str, darpan_id: str = None) -> FoodBankProfile:
        profile = FoodBankProfile(
            id=new_id("fb"),
            name=require(name, "name", "Food bank name"),
            location=require(location, "location", "Location"),
            email=require(email, "email", "Email"),
            darpan_id=darpan_id or None,
        )
        self._start_session(profile, "food-bank-dashboard")
        return profile

    def update_profile(self, profile: Profile) -> Profile:
        """Replace the active role's profile wholesale."""
        user_type = self.user_type()
        if user_type is None:
            raise ValidationError("No user is signed in.")
        if profile.user_type != user_type:
            raise ValidationError(
                f"Cannot save a {profile.user_type} profile for a {user_type} session.",
                field="user_type",
            )
        require(profile.name, "name", "Name")
        current = self.profile(user_type)
        if current is not None and not profile.id:
            profile.id = current.id
        self.save_profile(profile)
        return profile

    def logout(self) -> None:
        """End the session.

        Donation requests, notifications, requirement requests and cooked
        food records stay behind: they stand in for data other users of the
        demo would still see.
        """
        self.store.set(keys.CURRENT_PAGE, "welcome")
        self.store.set(keys.USER_TYPE, None)
        self.store.set(keys.INVENTORY, [])
        self.store.set(keys.USER_PROFILE, None)
        self.store.set(keys.HOTEL_PROFILE, None)
        self.store.set(keys.FOOD_BANK_PROFILE, None)
        self.store.set(keys.DONATION_COUNT, 0)
        self.store.set(keys.SHOPPING_LIST, [])
        self.store.set(keys.WASTE_HOTSPOTS, [])
        LOGGER.info("Session cleared")
