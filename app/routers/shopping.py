from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException
from fastapi.responses import PlainTextResponse

from app.dependencies import get_remote_views, get_state
from pantrix.core import ai_assistant
from pantrix.core import shopping_list as shopping_core
from pantrix.core.remote import RemoteViews, run
from pantrix.core.state import AppState

router = APIRouter(prefix="/shopping", tags=["shopping"])


@router.get("")
def shopping_page(state: AppState = Depends(get_state)):
    return state.shopping_list()


@router.post("/generate")
def shopping_generate(
    state: AppState = Depends(get_state),
    views: RemoteViews = Depends(get_remote_views),
):
    view = views["shopping_list"]
    suggestions = run(view, ai_assistant.suggest_shopping_list, state.inventory(),
                      error_message="Could not generate a shopping list right now.")
    if suggestions is None:
        raise HTTPException(status_code=502, detail=view.error)
    return shopping_core.merge_ai_suggestions(state, suggestions)


@router.post("/add")
def shopping_add(
    name: str = Form(...),
    quantity: str = Form(""),
    notes: str = Form(""),
    state: AppState = Depends(get_state),
):
    return shopping_core.add_manual_item(state, name, quantity, notes or None)


@router.post("/{item_id}")
def shopping_update(
    item_id: str,
    name: Optional[str] = Form(None),
    quantity: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    checked: Optional[bool] = Form(None),
    state: AppState = Depends(get_state),
):
    changes = {"name": name, "quantity": quantity, "notes": notes, "checked": checked}
    return shopping_core.update_item(state, item_id, **{k: v for k, v in changes.items() if v is not None})


@router.delete("/{item_id}")
def shopping_delete(item_id: str, state: AppState = Depends(get_state)):
    shopping_core.delete_item(state, item_id)
    return {"deleted": item_id}


@router.get("/export", response_class=PlainTextResponse)
def shopping_export(state: AppState = Depends(get_state)):
    return shopping_core.format_shopping_list(state.shopping_list())
