from fastapi import APIRouter, Depends

from app.dependencies import get_state
from pantrix.core import notifications as notifications_core
from pantrix.core.state import AppState

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def notifications_list(state: AppState = Depends(get_state)):
    return {
        "notifications": state.notifications(),
        "unread_count": notifications_core.unread_count_for(state),
    }


@router.post("/read")
def notifications_mark_read(state: AppState = Depends(get_state)):
    return {"marked": notifications_core.mark_all_read(state)}
