"""Dataclass models for all persisted entities.

Each class maps 1:1 to a record inside one JSON state slice. Fields use
Optional types for values the UI may leave blank. These are plain data
containers with no business logic; from_dict() tolerates unknown keys so
older slices keep loading after a field is dropped.
"""

from dataclasses import dataclass, field, fields
from typing import Optional

DONATION_STATUSES = ("pending", "accepted", "declined", "completed")
ORDER_STATUSES = ("placed", "preparing", "out_for_delivery", "delivered")
DELIVERY_TYPES = ("pickup", "dropoff")
NOTIFICATION_TYPES = ("new_requirement", "new_cooked_food_order")
CATEGORIES = ("Produce", "Dairy", "Meat", "Bakery", "Pantry", "Frozen", "Drinks", "Other")


def _known_fields(cls, data: dict) -> dict:
    names = {f.name for f in fields(cls) if f.init}
    return {k: v for k, v in data.items() if k in names}


@dataclass
class InventoryItem:
    """A pantry item. expiry_date is an ISO YYYY-MM-DD calendar date.

    quantity is free text ("1 Gallon", "50 lbs bag"); its leading number is
    what the bulk-expiry view looks at.
    """

    id: str
    name: str
    expiry_date: str
    quantity: str
    category: str

    @classmethod
    def from_dict(cls, data: dict) -> "InventoryItem":
        return cls(**_known_fields(cls, data))


@dataclass
class DonationRequest:
    """A hotel's offer of surplus items to a food bank.

    items holds copies taken from inventory at creation time.
    """

    id: str
    restaurant_name: str
    location: str
    items: list = field(default_factory=list)  # list[InventoryItem]
    status: str = "pending"
    donation_date: Optional[str] = None
    ngo_name: Optional[str] = None
    delivery_type: Optional[str] = None  # pickup, dropoff
    pickup_date_time: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "DonationRequest":
        values = _known_fields(cls, data)
        values["items"] = [InventoryItem.from_dict(i) for i in values.get("items") or []]
        return cls(**values)


@dataclass
class CookedFoodItem:
    """A ready-to-eat surplus dish announced by a hotel; one claimable unit."""

    id: str
    name: str
    description: str
    quantity: str
    available_until: str  # HH:MM
    hotel_name: str
    hotel_location: str
    hotel_id: str
    allergens: Optional[str] = None
    status: str = "available"  # available, claimed

    @classmethod
    def from_dict(cls, data: dict) -> "CookedFoodItem":
        return cls(**_known_fields(cls, data))


@dataclass
class DeliveryPerson:
    name: str
    phone: str

    @classmethod
    def from_dict(cls, data: dict) -> "DeliveryPerson":
        return cls(**_known_fields(cls, data))


@dataclass
class CookedFoodOrder:
    """An order created by claiming a CookedFoodItem.

    Timestamps are ISO datetimes. food_item_id never changes after creation.
    """

    id: str
    order_id: str
    food_item_id: str
    food_item_name: str
    hotel_id: str
    hotel_name: str
    hotel_location: str
    ordered_by: str
    ordered_by_id: str
    user_type: str  # public, food-bank
    delivery_address: str
    contact_number: str
    order_timestamp: str
    status: str = "placed"
    delivery_person: Optional[DeliveryPerson] = None
    estimated_delivery_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CookedFoodOrder":
        values = _known_fields(cls, data)
        if values.get("delivery_person"):
            values["delivery_person"] = DeliveryPerson.from_dict(values["delivery_person"])
        return cls(**values)


@dataclass
class RequirementRequest:
    """A food bank's broadcast of the items it currently needs."""

    id: str
    food_bank_name: str
    food_bank_location: str
    requested_items: list
    message: str
    timestamp: str

    @classmethod
    def from_dict(cls, data: dict) -> "RequirementRequest":
        return cls(**_known_fields(cls, data))


@dataclass
class Notification:
    id: str
    type: str
    title: str
    message: str
    timestamp: str
    read: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Notification":
        return cls(**_known_fields(cls, data))


@dataclass
class WasteHotspot:
    """A restaurant likely to have surplus food, shown on the food-bank map.

    waste_score runs from 1 (low) to 10 (high).
    """

    id: str
    name: str
    address: str
    latitude: float
    longitude: float
    waste_score: float
    contact_email: str
    contact_phone: str

    @classmethod
    def from_dict(cls, data: dict) -> "WasteHotspot":
        return cls(**_known_fields(cls, data))


@dataclass
class ShoppingListItem:
    id: str
    name: str
    quantity: str
    reason: str
    notes: Optional[str] = None
    checked: bool = False
    is_ai_generated: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "ShoppingListItem":
        return cls(**_known_fields(cls, data))


@dataclass
class Recipe:
    """An AI-suggested recipe. Not persisted; lives only in a view."""

    name: str
    description: str
    ingredients: list = field(default_factory=list)  # list[str]
    instructions: list = field(default_factory=list)  # list[str]


@dataclass
class Nutrition:
    """Percentages of the plate; the four values add up to 100."""

    carbohydrates: float
    proteins: float
    fats: float
    vitamins_and_minerals: float


@dataclass
class SmartPlate:
    name: str
    description: str
    calories: float
    nutrition: Nutrition
    ingredients: list = field(default_factory=list)
    instructions: list = field(default_factory=list)


@dataclass
class GeoLocation:
    latitude: float
    longitude: float


@dataclass
class NearbyFoodBank:
    name: str
    address: str
    latitude: float
    longitude: float


# ── Profiles ──────────────────────────────────────────────────────────────────
# One record type per role; user_type is the tag and is fixed per class.


@dataclass
class PublicProfile:
    id: str
    name: str
    email: str
    country: str
    weight: float = 70
    weight_unit: str = "kg"  # kg, lbs
    height: float = 175
    height_unit: str = "cm"  # cm, in
    preferences: list = field(default_factory=list)
    user_type: str = field(default="public", init=False)

    @classmethod
    def from_dict(cls, data: dict) -> "PublicProfile":
        return cls(**_known_fields(cls, data))


@dataclass
class HotelProfile:
    id: str
    name: str
    location: str
    email: str
    cuisine_type: Optional[str] = None
    contact_number: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    user_type: str = field(default="hotel", init=False)

    @classmethod
    def from_dict(cls, data: dict) -> "HotelProfile":
        return cls(**_known_fields(cls, data))


@dataclass
class FoodBankProfile:
    id: str
    name: str
    location: str
    email: str
    contact_person: Optional[str] = None
    phone_number: Optional[str] = None
    website: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    darpan_id: Optional[str] = None
    user_type: str = field(default="food-bank", init=False)

    @classmethod
    def from_dict(cls, data: dict) -> "FoodBankProfile":
        return cls(**_known_fields(cls, data))


PROFILE_TYPES = {
    "public": PublicProfile,
    "hotel": HotelProfile,
    "food-bank": FoodBankProfile,
}
