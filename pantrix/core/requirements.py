"""Requirement requests — food banks broadcasting what they need.

Each broadcast is stored once (newest first) and fanned out as a
notification to partner hotels.  Records are never edited or removed.
"""

import logging
from datetime import datetime
from typing import Optional

from pantrix.core.notifications import requirement_notification
from pantrix.core.state import AppState, ValidationError, new_id
from pantrix.db.models import FoodBankProfile, RequirementRequest

LOGGER = logging.getLogger(__name__)


def broadcast_requirement(
    state: AppState,
    requested_items: list[str],
    message: str = "",
    now: Optional[datetime] = None,
) -> RequirementRequest:
    """Record a requirement request from the signed-in food bank and notify hotels."""
    profile = state.active_profile()
    if not isinstance(profile, FoodBankProfile):
        raise ValidationError("Only a signed-in food bank can broadcast requirements.")
    items = [i.strip() for i in requested_items or [] if i and i.strip()]
    if not items:
        raise ValidationError("Select at least one requested item.", field="requested_items")

    now = now or datetime.now()
    request = RequirementRequest(
        id=new_id("req"),
        food_bank_name=profile.name,
        food_bank_location=profile.location,
        requested_items=items,
        message=(message or "").strip(),
        timestamp=now.isoformat(),
    )
    state.save_requirement_requests([request] + state.requirement_requests())
    requirement_notification(state, request, now=now)
    LOGGER.info("%s broadcast a requirement for %s", profile.name, ", ".join(items))
    return request
