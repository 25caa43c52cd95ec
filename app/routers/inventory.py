from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from app.dependencies import get_remote_views, get_state
from pantrix.core import ai_assistant, derived
from pantrix.core import inventory as inventory_core
from pantrix.core.notifications import unread_count_for
from pantrix.core.remote import RemoteViews, run
from pantrix.core.state import AppState

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("")
def inventory_list(q: str = "", state: AppState = Depends(get_state)):
    items = state.inventory()
    return inventory_core.search(items, q) if q else items


@router.get("/dashboard")
def dashboard(state: AppState = Depends(get_state)):
    summary = derived.dashboard_summary(state.inventory())
    return {
        "summary": summary,
        "membership_tier": state.membership_tier(),
        "donation_count": state.donation_count(),
        "unread_notifications": unread_count_for(state),
    }


@router.post("/add")
def inventory_add(
    name: str = Form(...),
    expiry_date: str = Form(...),
    quantity: str = Form(...),
    category: str = Form("Other"),
    state: AppState = Depends(get_state),
):
    return inventory_core.add_item(state, name, expiry_date, quantity, category)


@router.delete("/{item_id}")
def inventory_delete(item_id: str, state: AppState = Depends(get_state)):
    inventory_core.delete_item(state, item_id)
    return {"deleted": item_id}


# ── Bill scanning ──────────────────────────────────────────────────────────────

def _scan_result(state: AppState, views: RemoteViews, func, *args) -> dict:
    extracted = run(views["bill_scan"], func, *args,
                    error_message="Could not read items from that bill. Please try another photo.")
    if extracted is None:
        raise HTTPException(status_code=502, detail=views["bill_scan"].error)
    added = inventory_core.add_scanned_items(state, extracted)
    return {"added": added, "dropped": len(extracted) - len(added)}


@router.post("/scan")
def inventory_scan(
    file: UploadFile = File(...),
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    media_type = file.content_type or "image/jpeg"
    return _scan_result(state, views, ai_assistant.extract_items_from_image, file.file.read(), media_type)


@router.post("/scan-url")
def inventory_scan_url(
    url: str = Form(...),
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    return _scan_result(state, views, ai_assistant.extract_items_from_url, url)
