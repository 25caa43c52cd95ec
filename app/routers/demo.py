"""Demo router — read-only views of the shared slices backed by the demo DB.

Sets db path override ContextVar so all core/ functions use demo.db.
No write routes are exposed here.
"""
import os
from pathlib import Path

from fastapi import APIRouter

from pantrix.core import cooked_food as cooked_core
from pantrix.core import derived
from pantrix.core.state import AppState
from pantrix.db.database import override_db_path

router = APIRouter(prefix="/demo", tags=["demo"])


def _demo_db_path() -> Path:
    return Path(os.environ.get("DEMO_DB_URL", "data/demo.db"))


@router.get("/donations")
def demo_donations():
    with override_db_path(_demo_db_path()):
        return AppState().donation_requests()


@router.get("/cooked-food")
def demo_cooked_food():
    with override_db_path(_demo_db_path()):
        return cooked_core.available_items(AppState().cooked_food_items())


@router.get("/requirements")
def demo_requirements():
    with override_db_path(_demo_db_path()):
        return AppState().requirement_requests()


@router.get("/dashboard")
def demo_dashboard():
    with override_db_path(_demo_db_path()):
        state = AppState()
        return {
            "summary": derived.dashboard_summary(state.inventory()),
            "membership_tier": state.membership_tier(),
        }
