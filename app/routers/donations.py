from typing import Optional

from fastapi import APIRouter, Depends, Form

from app.dependencies import get_state
from pantrix.core import donations as donations_core
from pantrix.core.state import AppState, ValidationError
from pantrix.db.models import DONATION_STATUSES, HotelProfile

router = APIRouter(prefix="/donations", tags=["donations"])


@router.get("")
def donations_list(status: str = "", state: AppState = Depends(get_state)):
    requests = state.donation_requests()
    if not status:
        return requests
    if status not in DONATION_STATUSES:
        raise ValidationError(f"Unknown status '{status}'.", field="status")
    return donations_core.requests_by_status(requests, status)


@router.get("/history")
def donations_history(state: AppState = Depends(get_state)):
    profile = state.active_profile()
    if not isinstance(profile, HotelProfile):
        raise ValidationError("Only a signed-in hotel has a donation history.")
    return donations_core.donation_history(state.donation_requests(), profile.name)


@router.post("")
def donations_create(
    item_ids: list[str] = Form(...),
    ngo_name: str = Form(...),
    delivery_type: str = Form("pickup"),
    pickup_date: str = Form(""),
    pickup_time: str = Form(""),
    notes: Optional[str] = Form(None),
    state: AppState = Depends(get_state),
):
    pickup_date_time = donations_core.build_pickup_date_time(delivery_type, pickup_date, pickup_time)
    return donations_core.create_donation_request(
        state, item_ids, ngo_name,
        delivery_type=delivery_type,
        pickup_date_time=pickup_date_time,
        notes=notes,
    )


@router.post("/{request_id}/accept")
def donations_accept(request_id: str, state: AppState = Depends(get_state)):
    return donations_core.accept_donation(state, request_id)


@router.post("/{request_id}/decline")
def donations_decline(request_id: str, state: AppState = Depends(get_state)):
    return donations_core.decline_donation(state, request_id)


@router.post("/{request_id}/complete")
def donations_complete(request_id: str, state: AppState = Depends(get_state)):
    return donations_core.complete_donation(state, request_id)
