from typing import Optional

from fastapi import APIRouter, Depends, Form

from app.dependencies import get_state
from pantrix.core import cooked_food as cooked_core
from pantrix.core.state import AppState
from pantrix.db.models import DeliveryPerson

router = APIRouter(prefix="/cooked-food", tags=["cooked-food"])


def _delivery_person(name: str, phone: str) -> Optional[DeliveryPerson]:
    if not name and not phone:
        return None
    return DeliveryPerson(name=name.strip(), phone=phone.strip())


@router.get("")
def cooked_food_list(include_claimed: bool = False, state: AppState = Depends(get_state)):
    items = state.cooked_food_items()
    return items if include_claimed else cooked_core.available_items(items)


@router.post("")
def cooked_food_announce(
    name: str = Form(...),
    description: str = Form(""),
    quantity: str = Form(...),
    available_until: str = Form(...),
    allergens: str = Form(""),
    state: AppState = Depends(get_state),
):
    return cooked_core.announce_cooked_food(state, name, description, quantity, available_until, allergens or None)


@router.post("/{item_id}/claim")
def cooked_food_claim(
    item_id: str,
    address: str = Form(""),
    contact: str = Form(""),
    state: AppState = Depends(get_state),
):
    return cooked_core.claim_cooked_food(state, item_id, address, contact)


# ── Orders ─────────────────────────────────────────────────────────────────────

@router.get("/orders")
def orders_list(state: AppState = Depends(get_state)):
    """Orders for the signed-in role: a hotel sees orders for its food, others their own."""
    profile = state.active_profile()
    orders = state.cooked_food_orders()
    if profile is None:
        return []
    if profile.user_type == "hotel":
        return cooked_core.orders_for_hotel(orders, profile.id)
    return cooked_core.orders_for_user(orders, profile.id)


@router.post("/orders/{order_id}/advance")
def orders_advance(
    order_id: str,
    delivery_name: str = Form(""),
    delivery_phone: str = Form(""),
    state: AppState = Depends(get_state),
):
    return cooked_core.advance_order(state, order_id, _delivery_person(delivery_name, delivery_phone))


@router.post("/orders/{order_id}/status")
def orders_status(
    order_id: str,
    status: str = Form(...),
    delivery_name: str = Form(""),
    delivery_phone: str = Form(""),
    state: AppState = Depends(get_state),
):
    return cooked_core.update_order_status(
        state, order_id, status, _delivery_person(delivery_name, delivery_phone),
    )
