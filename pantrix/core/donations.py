"""Donation requests — creation and the pending/accepted/declined/completed lifecycle.

Creating a request is one operation with three effects that always happen
together:

    pre:  a hotel is signed in; every donated item id is in its inventory;
          an NGO is named; the delivery type is pickup or dropoff.
    post: a pending request holding copies of the items is first in the
          donation-request slice, exactly those items are gone from the
          inventory, and the donation counter is one higher.

All three new slices are built before anything is written, so a request
that fails validation changes nothing.

Transitions:

    pending  -> accepted | declined
    accepted -> completed   (stamps donation_date)

declined and completed are terminal.
"""

import copy
import logging
from datetime import date
from typing import Optional

from pantrix.core.state import AppState, ValidationError, new_id, require
from pantrix.db.models import DELIVERY_TYPES, DonationRequest, HotelProfile, InventoryItem

LOGGER = logging.getLogger(__name__)

TRANSITIONS = {
    "pending": ("accepted", "declined"),
    "accepted": ("completed",),
    "declined": (),
    "completed": (),
}


class DonationNotFoundError(Exception):
    """Raised when a donation request id does not exist."""

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Donation request with ID {request_id} not found")


class InvalidTransitionError(Exception):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, entity: str, entity_id: str, current: str, target: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {entity} {entity_id} from '{current}' to '{target}'")


def build_pickup_date_time(delivery_type: str, pickup_date: str = "", pickup_time: str = "") -> Optional[str]:
    """Combine the wizard's date and time fields; only pickups carry one."""
    if delivery_type == "pickup" and pickup_date and pickup_time:
        return f"{pickup_date}T{pickup_time}"
    return None


def create_donation_request(
    state: AppState,
    item_ids: list[str],
    ngo_name: str,
    delivery_type: str = "pickup",
    pickup_date_time: Optional[str] = None,
    notes: Optional[str] = None,
) -> DonationRequest:
    """Create a pending request, remove the items from inventory, bump the counter."""
    profile = state.active_profile()
    if not isinstance(profile, HotelProfile):
        raise ValidationError("Only a signed-in hotel can create donation requests.")
    if not item_ids:
        raise ValidationError("Please select at least one item to donate.", field="item_ids")
    ngo = require(ngo_name, "ngo_name", "NGO")
    if delivery_type not in DELIVERY_TYPES:
        raise ValidationError(f"Delivery type must be one of {', '.join(DELIVERY_TYPES)}.", field="delivery_type")

    inventory = state.inventory()
    by_id = {item.id: item for item in inventory}
    wanted = list(dict.fromkeys(item_ids))
    missing = [i for i in wanted if i not in by_id]
    if missing:
        raise ValidationError(f"Items not in inventory: {', '.join(missing)}", field="item_ids")

    donated: list[InventoryItem] = [copy.deepcopy(by_id[i]) for i in wanted]
    request = DonationRequest(
        id=new_id("don"),
        restaurant_name=profile.name,
        location=profile.location,
        items=donated,
        status="pending",
        ngo_name=ngo,
        delivery_type=delivery_type,
        pickup_date_time=pickup_date_time if delivery_type == "pickup" else None,
        notes=(notes or "").strip() or None,
    )
    requests = [request] + state.donation_requests()
    donated_ids = set(wanted)
    remaining = [item for item in inventory if item.id not in donated_ids]
    count = state.donation_count() + 1

    state.save_donation_requests(requests)
    state.save_inventory(remaining)
    state.save_donation_count(count)
    LOGGER.info("%s created donation %s with %d item(s) for %s", profile.name, request.id, len(donated), ngo)
    return request


def _transition(state: AppState, request_id: str, target: str, today: date = None) -> DonationRequest:
    requests = state.donation_requests()
    request = next((r for r in requests if r.id == request_id), None)
    if request is None:
        raise DonationNotFoundError(request_id)
    if target not in TRANSITIONS.get(request.status, ()):
        raise InvalidTransitionError("donation request", request_id, request.status, target)
    request.status = target
    if target == "completed":
        request.donation_date = (today or date.today()).isoformat()
    state.save_donation_requests(requests)
    LOGGER.info("Donation %s is now %s", request_id, target)
    return request


def accept_donation(state: AppState, request_id: str) -> DonationRequest:
    return _transition(state, request_id, "accepted")


def decline_donation(state: AppState, request_id: str) -> DonationRequest:
    return _transition(state, request_id, "declined")


def complete_donation(state: AppState, request_id: str, today: date = None) -> DonationRequest:
    return _transition(state, request_id, "completed", today=today)


def requests_by_status(requests: list[DonationRequest], status: str) -> list[DonationRequest]:
    return [r for r in requests if r.status == status]


def donation_history(requests: list[DonationRequest], restaurant_name: str) -> list[DonationRequest]:
    """Completed donations from one restaurant, most recent donation first."""
    completed = [r for r in requests if r.restaurant_name == restaurant_name and r.status == "completed"]
    return sorted(completed, key=lambda r: r.donation_date or "", reverse=True)
