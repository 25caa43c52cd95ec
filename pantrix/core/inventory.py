"""Inventory management — add, scan-import, delete and search pantry items.

The inventory slice is kept sorted ascending by expiry date: every insert
re-sorts the whole list (stable, so same-day items keep insertion order).
"""

import logging
from datetime import date, timedelta
from typing import Optional

from pantrix.core.derived import is_calendar_date, parse_calendar_date
from pantrix.core.state import AppState, ValidationError, ensure_unique, new_id, require
from pantrix.db.models import InventoryItem

LOGGER = logging.getLogger(__name__)


class InventoryItemNotFoundError(Exception):
    """Raised when an inventory item id is not in the current inventory."""

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Inventory item with ID {item_id} not found")


def sort_by_expiry(items: list[InventoryItem]) -> list[InventoryItem]:
    """Return items ordered by expiry date; unparseable dates sort last."""
    def key(item):
        try:
            return (0, parse_calendar_date(item.expiry_date))
        except ValueError:
            return (1, date.max)
    return sorted(items, key=key)


def _validated(name, expiry_date, quantity, category) -> dict:
    expiry = require(expiry_date, "expiry_date", "Expiry date")
    if not is_calendar_date(expiry):
        raise ValidationError("Expiry date must be in YYYY-MM-DD format.", field="expiry_date")
    return {
        "name": require(name, "name", "Name"),
        "expiry_date": expiry,
        "quantity": require(quantity, "quantity", "Quantity"),
        "category": (category or "").strip() or "Other",
    }


def add_item(state: AppState, name: str, expiry_date: str, quantity: str, category: str) -> InventoryItem:
    """Validate and insert a manually entered item. Returns the new item."""
    item = InventoryItem(id=new_id("item"), **_validated(name, expiry_date, quantity, category))
    items = state.inventory()
    ensure_unique("inventory", items, item.id)
    state.save_inventory(sort_by_expiry(items + [item]))
    return item


def add_scanned_items(state: AppState, scanned: list[dict]) -> list[InventoryItem]:
    """Insert items extracted from a scanned bill.

    Entries missing a name or carrying a non YYYY-MM-DD expiry are dropped.
    Returns the items actually added.
    """
    added = []
    for raw in scanned:
        try:
            fields = _validated(
                raw.get("name"), raw.get("expiry_date"),
                raw.get("quantity") or "1 unit", raw.get("category"),
            )
        except ValidationError as e:
            LOGGER.warning("Dropping scanned item %r: %s", raw, e)
            continue
        added.append(InventoryItem(id=new_id("scan"), **fields))
    if added:
        state.save_inventory(sort_by_expiry(state.inventory() + added))
    return added


def get(state: AppState, item_id: str) -> Optional[InventoryItem]:
    return next((i for i in state.inventory() if i.id == item_id), None)


def delete_item(state: AppState, item_id: str) -> None:
    """Remove an item by id."""
    items = state.inventory()
    remaining = [i for i in items if i.id != item_id]
    if len(remaining) == len(items):
        raise InventoryItemNotFoundError(item_id)
    state.save_inventory(remaining)


def search(items: list[InventoryItem], query: str = "") -> list[InventoryItem]:
    """Case-insensitive name filter, ordered by expiry."""
    needle = (query or "").strip().lower()
    return sort_by_expiry([i for i in items if needle in i.name.lower()])


# (name, days from today, hotel quantity, household quantity, category)
STARTER_ITEMS = [
    ("Bread", 1, "20 Loaves", "1 Loaf", "Bakery"),
    ("Avocadoes", 2, "40 units", "2 units", "Produce"),
    ("Chicken Breast", 2, "50 lbs", "1 lb", "Meat"),
    ("Old Berries", -2, "1 pint", "1 pint", "Produce"),
    ("Milk", 3, "12 Gallons", "0.5 Gallon", "Dairy"),
    ("Potatoes", 4, "50 lbs bag", "2 lbs", "Produce"),
    ("Onions", 5, "25 lbs bag", "1 lb", "Produce"),
    ("Eggs", 10, "10 Dozen", "1 Dozen", "Dairy"),
    ("Cheese", 20, "15 lbs", "8 oz", "Dairy"),
    ("Spinach", 5, "5 lbs", "1 bag", "Produce"),
    ("Tomatoes", 6, "30 lbs", "1 lb", "Produce"),
    ("Pasta", 30, "20 boxes", "1 box", "Pantry"),
]


def seed_starter_inventory(state: AppState, today: date = None) -> list[InventoryItem]:
    """Fill an empty inventory with demo items sized for the current role.

    Only public users and hotels keep an inventory.  Does nothing when the
    inventory already has items.
    """
    user_type = state.user_type()
    if user_type not in ("public", "hotel") or state.inventory():
        return []
    today = today or date.today()
    hotel = user_type == "hotel"
    items = [
        InventoryItem(
            id=new_id("item"),
            name=name,
            expiry_date=(today + timedelta(days=offset)).isoformat(),
            quantity=hotel_qty if hotel else home_qty,
            category=category,
        )
        for name, offset, hotel_qty, home_qty, category in STARTER_ITEMS
    ]
    items = sort_by_expiry(items)
    state.save_inventory(items)
    return items
