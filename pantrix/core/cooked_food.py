"""Cooked food surplus — hotel announcements, claims, and order tracking.

A CookedFoodItem is one claimable unit.  Claiming it is a compare-and-swap:
read the item's status, refuse if it is already 'claimed', otherwise flip it
and create exactly one order that points back at it.

Orders only ever move one step forward:

    placed -> preparing -> out_for_delivery -> delivered

Estimated delivery time is set on entry to each state: now + 30 min when
placed, now + 15 min when out for delivery (which also needs a delivery
person), and now when delivered.
"""

import logging
import secrets
import string
from datetime import datetime, timedelta
from typing import Optional

from pantrix.core.donations import InvalidTransitionError
from pantrix.core.notifications import order_notification
from pantrix.core.state import AppState, ValidationError, new_id, require
from pantrix.db.models import (
    ORDER_STATUSES,
    CookedFoodItem,
    CookedFoodOrder,
    DeliveryPerson,
    FoodBankProfile,
    HotelProfile,
    PublicProfile,
)

LOGGER = logging.getLogger(__name__)

PLACED_ETA = timedelta(minutes=30)
OUT_FOR_DELIVERY_ETA = timedelta(minutes=15)
ORDER_CODE_PREFIX = "PANTRIX-"


class AlreadyClaimedError(Exception):
    """Raised when a cooked food item has already been claimed."""

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Cooked food item {item_id} has already been claimed")


class CookedFoodNotFoundError(Exception):
    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Cooked food item with ID {item_id} not found")


class OrderNotFoundError(Exception):
    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"Order with ID {order_id} not found")


def _order_code() -> str:
    alphabet = string.ascii_uppercase + string.digits
    return ORDER_CODE_PREFIX + "".join(secrets.choice(alphabet) for _ in range(6))


def next_status(status: str) -> Optional[str]:
    """The status after `status`, or None once delivered."""
    index = ORDER_STATUSES.index(status)
    return ORDER_STATUSES[index + 1] if index + 1 < len(ORDER_STATUSES) else None


def announce_cooked_food(
    state: AppState,
    name: str,
    description: str,
    quantity: str,
    available_until: str,
    allergens: Optional[str] = None,
) -> CookedFoodItem:
    """Publish a surplus dish from the signed-in hotel."""
    profile = state.active_profile()
    if not isinstance(profile, HotelProfile):
        raise ValidationError("Only a signed-in hotel can announce cooked food.")
    until = require(available_until, "available_until", "Available until")
    try:
        datetime.strptime(until, "%H:%M")
    except ValueError:
        raise ValidationError("Available until must be a HH:MM time.", field="available_until")

    item = CookedFoodItem(
        id=new_id("cooked"),
        name=require(name, "name", "Dish name"),
        description=(description or "").strip(),
        quantity=require(quantity, "quantity", "Quantity"),
        available_until=until,
        hotel_name=profile.name,
        hotel_location=profile.location,
        hotel_id=profile.id,
        allergens=(allergens or "").strip() or None,
        status="available",
    )
    state.save_cooked_food_items([item] + state.cooked_food_items())
    LOGGER.info("%s announced %s", profile.name, item.name)
    return item


def claim_cooked_food(
    state: AppState,
    food_item_id: str,
    address: str,
    contact: str,
    now: Optional[datetime] = None,
) -> CookedFoodOrder:
    """Claim an available item for the signed-in public user or food bank.

    Raises AlreadyClaimedError if someone got there first.
    """
    address = require(address, "address", "Delivery address")
    contact = require(contact, "contact", "Contact number")
    profile = state.active_profile()
    if not isinstance(profile, (PublicProfile, FoodBankProfile)):
        raise ValidationError("Sign in as a public user or food bank to claim food.")

    items = state.cooked_food_items()
    item = next((i for i in items if i.id == food_item_id), None)
    if item is None:
        raise CookedFoodNotFoundError(food_item_id)
    if item.status == "claimed":
        raise AlreadyClaimedError(food_item_id)

    now = now or datetime.now()
    item.status = "claimed"
    order = CookedFoodOrder(
        id=new_id("order"),
        order_id=_order_code(),
        food_item_id=item.id,
        food_item_name=item.name,
        hotel_id=item.hotel_id,
        hotel_name=item.hotel_name,
        hotel_location=item.hotel_location,
        ordered_by=profile.name,
        ordered_by_id=profile.id,
        user_type=profile.user_type,
        delivery_address=address,
        contact_number=contact,
        order_timestamp=now.isoformat(),
        status="placed",
        estimated_delivery_time=(now + PLACED_ETA).isoformat(),
    )
    state.save_cooked_food_items(items)
    state.save_cooked_food_orders([order] + state.cooked_food_orders())
    order_notification(state, item, profile.name, now=now)
    LOGGER.info("%s claimed %s as order %s", profile.name, item.name, order.order_id)
    return order


def update_order_status(
    state: AppState,
    order_id: str,
    status: str,
    delivery_person: Optional[DeliveryPerson] = None,
    now: Optional[datetime] = None,
) -> CookedFoodOrder:
    """Move an order to `status`, which must be the immediate next status."""
    if status not in ORDER_STATUSES:
        raise ValidationError(f"Unknown order status '{status}'.", field="status")
    orders = state.cooked_food_orders()
    order = next((o for o in orders if o.id == order_id), None)
    if order is None:
        raise OrderNotFoundError(order_id)
    if next_status(order.status) != status:
        raise InvalidTransitionError("order", order_id, order.status, status)

    now = now or datetime.now()
    if status == "out_for_delivery":
        if delivery_person is None or not delivery_person.name or not delivery_person.phone:
            raise ValidationError("Assign a delivery person before dispatching.", field="delivery_person")
        order.delivery_person = delivery_person
        order.estimated_delivery_time = (now + OUT_FOR_DELIVERY_ETA).isoformat()
    elif status == "delivered":
        order.estimated_delivery_time = now.isoformat()
    order.status = status
    state.save_cooked_food_orders(orders)
    LOGGER.info("Order %s is now %s", order.order_id, status)
    return order


def advance_order(
    state: AppState,
    order_id: str,
    delivery_person: Optional[DeliveryPerson] = None,
    now: Optional[datetime] = None,
) -> CookedFoodOrder:
    """Move an order one step forward."""
    order = next((o for o in state.cooked_food_orders() if o.id == order_id), None)
    if order is None:
        raise OrderNotFoundError(order_id)
    target = next_status(order.status)
    if target is None:
        raise InvalidTransitionError("order", order_id, order.status, "(none)")
    return update_order_status(state, order_id, target, delivery_person=delivery_person, now=now)


def available_items(items: list[CookedFoodItem]) -> list[CookedFoodItem]:
    return [i for i in items if i.status == "available"]


def orders_for_hotel(orders: list[CookedFoodOrder], hotel_id: str) -> list[CookedFoodOrder]:
    return [o for o in orders if o.hotel_id == hotel_id]


def orders_for_user(orders: list[CookedFoodOrder], user_id: str) -> list[CookedFoodOrder]:
    return [o for o in orders if o.ordered_by_id == user_id]
