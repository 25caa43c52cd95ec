from fastapi import APIRouter, Depends, Form

from app.dependencies import get_state
from pantrix.core.requirements import broadcast_requirement
from pantrix.core.state import AppState

router = APIRouter(prefix="/requirements", tags=["requirements"])


@router.get("")
def requirements_list(state: AppState = Depends(get_state)):
    return state.requirement_requests()


@router.post("")
def requirements_broadcast(
    requested_items: list[str] = Form(...),
    message: str = Form(""),
    state: AppState = Depends(get_state),
):
    return broadcast_requirement(state, requested_items, message)
