"""AI-backed views — recipes, smart plate, NGO lookup, delivery riders, geocoding.

Every call goes through a RemoteView so the latest outcome of each view can
be polled at /assistant/status/{view}.  A failed call answers 502 with the
view's user-facing error message.
"""
from datetime import date
from typing import Any, Callable

from fastapi import APIRouter, Depends, Form, HTTPException

from app.dependencies import get_remote_views, get_state
from pantrix.core import ai_assistant, derived, session_data
from pantrix.core import inventory as inventory_core
from pantrix.core.remote import RemoteViews, run
from pantrix.core.state import AppState, ValidationError
from pantrix.db.models import PublicProfile

router = APIRouter(prefix="/assistant", tags=["assistant"])


def _call(views: RemoteViews, name: str, func: Callable, *args, error_message: str = None, **kwargs) -> Any:
    view = views[name]
    result = run(view, func, *args, error_message=error_message, **kwargs)
    if result is None:
        raise HTTPException(status_code=502, detail=view.error)
    return result


def _public_profile(state: AppState):
    profile = state.active_profile()
    return profile if isinstance(profile, PublicProfile) else None


def _items(state: AppState, item_ids: list[str]) -> list:
    by_id = {i.id: i for i in state.inventory()}
    missing = [i for i in item_ids if i not in by_id]
    if missing:
        raise ValidationError(f"Items not in inventory: {', '.join(missing)}", field="item_ids")
    return [by_id[i] for i in item_ids]


def _location(state: AppState, location: str) -> str:
    if location:
        return location
    profile = state.active_profile()
    if profile is None:
        raise ValidationError("A location is required.", field="location")
    return getattr(profile, "location", None) or getattr(profile, "country", "")


@router.get("/status/{view_name}")
def assistant_status(view_name: str, views: RemoteViews = Depends(get_remote_views)):
    try:
        return views[view_name].snapshot()
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown view '{view_name}'")


# ── Recipes & meals ────────────────────────────────────────────────────────────

@router.post("/recipes")
def assistant_recipes(
    item_id: str = Form(...),
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    item = inventory_core.get(state, item_id)
    if item is None:
        raise inventory_core.InventoryItemNotFoundError(item_id)
    return _call(
        views, "recipes", ai_assistant.suggest_recipes, item.name,
        profile=_public_profile(state), language=state.language(),
        error_message="Sorry, we couldn't generate recipes at this time.",
    )


@router.post("/smart-recipes")
def assistant_smart_recipes(
    item_ids: list[str] = Form([]),
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    """Recipes that use up several items at once; defaults to what expires within two days."""
    items = _items(state, item_ids) if item_ids else derived.hotel_expiring_soon(state.inventory(), date.today())
    if not items:
        raise ValidationError("No items are expiring soon.", field="item_ids")
    return _call(
        views, "smart_recipes", ai_assistant.suggest_recipes_for_set, [i.name for i in items],
        profile=_public_profile(state), language=state.language(),
        error_message="Could not fetch smart recipes.",
    )


@router.post("/smart-plate")
def assistant_smart_plate(
    item_ids: list[str] = Form(...),
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    items = _items(state, item_ids)
    return _call(
        views, "smart_plate", ai_assistant.generate_meal_plan, [i.name for i in items],
        profile=_public_profile(state), language=state.language(),
        error_message="Failed to generate a Smart Plate. Please try again.",
    )


# ── Places & people ────────────────────────────────────────────────────────────

@router.get("/ngos")
def assistant_ngos(
    location: str = "",
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    return _call(views, "ngos", ai_assistant.list_nearby_food_banks, _location(state, location),
                 error_message="Could not find nearby NGOs.")


@router.get("/delivery-people")
def assistant_delivery_people(
    location: str = "",
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    return _call(views, "delivery_people", ai_assistant.list_delivery_people, _location(state, location),
                 error_message="Could not fetch delivery personnel. Please enter details manually.")


@router.get("/business-names")
def assistant_business_names(location: str, kind: str = "restaurant"):
    if kind not in ("restaurant", "food bank"):
        raise ValidationError("kind must be 'restaurant' or 'food bank'.", field="kind")
    return ai_assistant.list_business_names(location, kind)


@router.post("/geocode")
def assistant_geocode(
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    """Fill in map coordinates for the signed-in hotel or food bank."""
    view = views["geocoding"]
    profile = run(view, session_data.geocode_active_profile, state)
    if view.error:
        raise HTTPException(status_code=502, detail=view.error)
    return profile or state.active_profile()


@router.post("/food-bank-data")
def assistant_food_bank_data(
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    added = _call(views, "food_bank_data", session_data.populate_food_bank_data, state)
    return {"added": added, "hotspots": state.waste_hotspots()}


@router.get("/hotspots")
def assistant_hotspots(state: AppState = Depends(get_state)):
    return state.waste_hotspots()
