"""Session router — sign-up, login, profile edit, logout and navigation state."""
from dataclasses import MISSING, asdict, fields

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request

from app.dependencies import get_remote_views, get_state
from demo.seed import seed_cooked_food
from pantrix.core import session_data
from pantrix.core.inventory import seed_starter_inventory
from pantrix.core.notifications import unread_count_for
from pantrix.core.remote import RemoteViews, run
from pantrix.core.state import AppState, ValidationError
from pantrix.db.models import PROFILE_TYPES, FoodBankProfile, HotelProfile, PublicProfile

router = APIRouter(prefix="/session", tags=["session"])

_FLOAT_FIELDS = ("weight", "height", "latitude", "longitude")


def _snapshot(state: AppState) -> dict:
    return {
        "current_page": state.current_page(),
        "user_type": state.user_type(),
        "public_view": state.public_view(),
        "hotel_view": state.hotel_view(),
        "language": state.language(),
        "profile": state.active_profile(),
        "membership_tier": state.membership_tier(),
        "donation_count": state.donation_count(),
        "unread_notifications": unread_count_for(state),
    }


def _enrich(state: AppState, views: RemoteViews) -> None:
    """Background work after a hotel or food bank signs in."""
    run(views["geocoding"], session_data.geocode_active_profile, state,
        error_message="Could not locate your address on the map.")
    if state.user_type() == "food-bank":
        run(views["food_bank_data"], session_data.populate_food_bank_data, state,
            error_message="Could not load nearby restaurant data.")


def _after_login(state: AppState, background: BackgroundTasks, views: RemoteViews) -> dict:
    seed_starter_inventory(state)
    seed_cooked_food(state)
    if state.user_type() in ("hotel", "food-bank"):
        background.add_task(_enrich, state, views)
    return _snapshot(state)


def _profile_from_form(cls, form, base: dict = None) -> object:
    """Build a profile from submitted fields, falling back to base for the rest."""
    data = dict(base or {})
    for key, value in form.multi_items():
        if key == "preferences":
            continue
        if key in _FLOAT_FIELDS:
            try:
                data[key] = float(value) if value != "" else None
            except ValueError:
                raise ValidationError(f"{key} must be a number.", field=key)
        else:
            data[key] = value or None
    if "preferences" in form:
        data["preferences"] = [p for p in form.getlist("preferences") if p]
    for f in fields(cls):
        if not f.init:
            continue
        if f.default is MISSING and f.default_factory is MISSING:
            data.setdefault(f.name, "")
        elif data.get(f.name) is None and f.default is not None:
            data.pop(f.name, None)
    return cls.from_dict(data)


@router.get("")
def session_state(state: AppState = Depends(get_state)):
    return _snapshot(state)


# ── Login & sign-up ────────────────────────────────────────────────────────────

@router.post("/login/public")
def login_public(
    background: BackgroundTasks,
    name: str = Form(...),
    email: str = Form(...),
    location: str = Form(""),
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    state.login_public(name, email, location)
    return _after_login(state, background, views)


@router.post("/login/hotel")
def login_hotel(
    background: BackgroundTasks,
    name: str = Form(...),
    location: str = Form(...),
    email: str = Form(...),
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    state.login_hotel(name, location, email)
    return _after_login(state, background, views)


@router.post("/login/food-bank")
def login_food_bank(
    background: BackgroundTasks,
    name: str = Form(...),
    location: str = Form(...),
    email: str = Form(...),
    darpan_id: str = Form(""),
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    state.login_food_bank(name, location, email, darpan_id or None)
    return _after_login(state, background, views)


@router.post("/signup/{user_type}")
async def sign_up(
    user_type: str,
    request: Request,
    background: BackgroundTasks,
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    if user_type not in PROFILE_TYPES:
        raise ValidationError(f"Unknown user type '{user_type}'.", field="user_type")
    form = await request.form()
    profile = _profile_from_form(PROFILE_TYPES[user_type], form)
    if isinstance(profile, PublicProfile):
        state.sign_up_public(profile)
    elif isinstance(profile, HotelProfile):
        state.sign_up_hotel(profile)
    elif isinstance(profile, FoodBankProfile):
        state.sign_up_food_bank(profile)
    return _after_login(state, background, views)


# ── Profile & logout ───────────────────────────────────────────────────────────

@router.post("/profile")
async def edit_profile(request: Request, state: AppState = Depends(get_state)):
    current = state.active_profile()
    if current is None:
        raise ValidationError("No user is signed in.")
    form = await request.form()
    base = asdict(current)
    base.pop("user_type")
    profile = _profile_from_form(type(current), form, base)
    profile.id = current.id
    return state.update_profile(profile)


@router.post("/logout")
def logout(state: AppState = Depends(get_state)):
    state.logout()
    return _snapshot(state)


# ── Navigation ─────────────────────────────────────────────────────────────────

@router.post("/page")
def set_page(page: str = Form(...), state: AppState = Depends(get_state)):
    state.set_current_page(page)
    return _snapshot(state)


@router.post("/view")
def set_view(view: str = Form(...), state: AppState = Depends(get_state)):
    user_type = state.user_type()
    if user_type == "public":
        state.set_public_view(view)
    elif user_type == "hotel":
        state.set_hotel_view(view)
    else:
        raise ValidationError("Only public users and hotels have dashboard views.", field="view")
    return _snapshot(state)


@router.post("/language")
def set_language(language: str = Form(...), state: AppState = Depends(get_state)):
    state.set_language(language)
    return _snapshot(state)
