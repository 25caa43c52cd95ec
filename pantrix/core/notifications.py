"""Notification fan-out — an append-only, newest-first event log.

Two events produce notifications: a food bank broadcasting a requirement
request and a cooked-food order being placed.  Records are never edited
individually; mark_all_read() is the only way `read` changes.
"""

from datetime import datetime
from typing import Optional

from pantrix.core.state import AppState, new_id
from pantrix.db.models import NOTIFICATION_TYPES, CookedFoodItem, Notification, RequirementRequest

# Roles that show an unread badge.
BADGE_ROLES = ("hotel",)


def notify(state: AppState, type: str, title: str, message: str, now: Optional[datetime] = None) -> Notification:
    """Prepend a new unread notification and return it."""
    if type not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type: {type}")
    now = now or datetime.now()
    notification = Notification(
        id=new_id("notif"),
        type=type,
        title=title,
        message=message,
        timestamp=now.isoformat(),
        read=False,
    )
    state.save_notifications([notification] + state.notifications())
    return notification


def requirement_notification(state: AppState, request: RequirementRequest, now: Optional[datetime] = None) -> Notification:
    return notify(
        state,
        "new_requirement",
        f"New Urgent Need from {request.food_bank_name}",
        f'Requesting: {", ".join(request.requested_items)}. Message: "{request.message}"',
        now=now,
    )


def order_notification(state: AppState, item: CookedFoodItem, ordered_by: str, now: Optional[datetime] = None) -> Notification:
    return notify(
        state,
        "new_cooked_food_order",
        f"New Order: {item.name}",
        f"An order was placed by {ordered_by}. Please confirm and prepare for delivery.",
        now=now,
    )


def mark_all_read(state: AppState) -> int:
    """Mark every notification read. Returns how many were unread."""
    notifications = state.notifications()
    changed = sum(1 for n in notifications if not n.read)
    for n in notifications:
        n.read = True
    state.save_notifications(notifications)
    return changed


def unread_count(notifications: list[Notification]) -> int:
    return sum(1 for n in notifications if not n.read)


def unread_count_for(state: AppState) -> int:
    """Badge count for the signed-in role; roles without a badge get 0."""
    if state.user_type() not in BADGE_ROLES:
        return 0
    return unread_count(state.notifications())
