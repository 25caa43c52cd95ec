"""Derived views over the inventory — expiry buckets, priority items, tiers.

Everything here is a pure function of its arguments: pass the inventory and
the calendar date to evaluate against, get a fresh result back.  Nothing is
cached and nothing is written.

Expiry dates are compared as calendar dates.  An expiry of YYYY-MM-DD is
parsed field by field into a date (no clock time, no timezone) and subtracted
from `today`, so "tomorrow" is always 1 regardless of where the process runs.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from pantrix.db.models import InventoryItem

LOGGER = logging.getLogger(__name__)

EXPIRING_SOON_DAYS = 3
HOTEL_EXPIRING_SOON_DAYS = 2
BULK_WINDOW_DAYS = 7
BULK_QUANTITY_THRESHOLD = 10
PRIORITY_LIMIT = 3

# (minimum donations, tier), highest first
MEMBERSHIP_TIERS = ((25, "Diamond"), (10, "Gold"), (1, "Silver"))

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_MAGNITUDE_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


class ExpiryBucket(str, Enum):
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    FRESH = "fresh"


def parse_calendar_date(value: str) -> date:
    """Parse 'YYYY-MM-DD' into a date. Raises ValueError on anything else."""
    match = _DATE_RE.match((value or "").strip())
    if not match:
        raise ValueError(f"Not a YYYY-MM-DD date: {value!r}")
    year, month, day = (int(g) for g in match.groups())
    return date(year, month, day)


def is_calendar_date(value: str) -> bool:
    try:
        parse_calendar_date(value)
        return True
    except ValueError:
        return False


def days_until_expiry(item: InventoryItem, today: date = None) -> int:
    """Whole days from today to the item's expiry date; negative once expired."""
    if today is None:
        today = date.today()
    return (parse_calendar_date(item.expiry_date) - today).days


def parse_quantity_magnitude(quantity: str) -> Optional[float]:
    """Return the leading number of a free-text quantity ('12 Gallons' -> 12.0).

    Returns None when the text does not start with a number.
    """
    match = _MAGNITUDE_RE.match(quantity or "")
    return float(match.group(1)) if match else None


def _days_by_item(inventory: list[InventoryItem], today: date) -> list[tuple[InventoryItem, int]]:
    result = []
    for item in inventory:
        try:
            result.append((item, days_until_expiry(item, today)))
        except ValueError:
            LOGGER.warning("Ignoring item %s with unparseable expiry date %r", item.id, item.expiry_date)
    return result


def _within(inventory, today, max_days) -> list[InventoryItem]:
    return [item for item, days in _days_by_item(inventory, today) if 0 <= days <= max_days]


def expired(inventory: list[InventoryItem], today: date = None) -> list[InventoryItem]:
    today = today or date.today()
    return [item for item, days in _days_by_item(inventory, today) if days < 0]


def expiring_soon(inventory: list[InventoryItem], today: date = None) -> list[InventoryItem]:
    """Items expiring today or within the next three days."""
    return _within(inventory, today or date.today(), EXPIRING_SOON_DAYS)


def hotel_expiring_soon(inventory: list[InventoryItem], today: date = None) -> list[InventoryItem]:
    """Hotel dashboard window: today or within the next two days."""
    return _within(inventory, today or date.today(), HOTEL_EXPIRING_SOON_DAYS)


def bulk_expiring(inventory: list[InventoryItem], today: date = None) -> list[InventoryItem]:
    """Large stock (leading quantity above 10) expiring within a week."""
    result = []
    for item in _within(inventory, today or date.today(), BULK_WINDOW_DAYS):
        magnitude = parse_quantity_magnitude(item.quantity)
        if magnitude is not None and magnitude > BULK_QUANTITY_THRESHOLD:
            result.append(item)
    return result


def priority_items(inventory: list[InventoryItem], today: date = None) -> list[InventoryItem]:
    """The first three expiring-soon items, in inventory order."""
    return expiring_soon(inventory, today)[:PRIORITY_LIMIT]


def classify(item: InventoryItem, today: date = None) -> ExpiryBucket:
    days = days_until_expiry(item, today)
    if days < 0:
        return ExpiryBucket.EXPIRED
    if days <= EXPIRING_SOON_DAYS:
        return ExpiryBucket.EXPIRING_SOON
    return ExpiryBucket.FRESH


def membership_tier(donation_count: int) -> Optional[str]:
    """Diamond from 25 donations, Gold from 10, Silver from 1; None below."""
    for minimum, tier in MEMBERSHIP_TIERS:
        if donation_count >= minimum:
            return tier
    return None


@dataclass
class DashboardSummary:
    """Everything the pantry dashboards render, computed in one pass."""

    expiring_soon: list = field(default_factory=list)
    hotel_expiring_soon: list = field(default_factory=list)
    bulk_expiring: list = field(default_factory=list)
    priority_items: list = field(default_factory=list)
    expired_count: int = 0
    expiring_soon_count: int = 0


def dashboard_summary(inventory: list[InventoryItem], today: date = None) -> DashboardSummary:
    today = today or date.today()
    soon = expiring_soon(inventory, today)
    return DashboardSummary(
        expiring_soon=soon,
        hotel_expiring_soon=hotel_expiring_soon(inventory, today),
        bulk_expiring=bulk_expiring(inventory, today),
        priority_items=soon[:PRIORITY_LIMIT],
        expired_count=len(expired(inventory, today)),
        expiring_soon_count=len(soon),
    )
