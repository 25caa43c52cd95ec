from datetime import datetime

import pytest

from pantrix.core import notifications
from pantrix.core.requirements import broadcast_requirement
from pantrix.core.state import ValidationError

NOW = datetime(2024, 7, 15, 9, 30)


def test_notify_prepends_unread(state):
    first = notifications.notify(state, "new_requirement", "One", "first", now=NOW)
    second = notifications.notify(state, "new_cooked_food_order", "Two", "second", now=NOW)
    stored = state.notifications()
    assert [n.id for n in stored] == [second.id, first.id]
    assert not any(n.read for n in stored)
    assert stored[0].timestamp == "2024-07-15T09:30:00"


def test_notify_rejects_unknown_type(state):
    with pytest.raises(ValueError):
        notifications.notify(state, "new_message", "Hi", "there")


def test_mark_all_read(state):
    notifications.notify(state, "new_requirement", "One", "first")
    notifications.notify(state, "new_requirement", "Two", "second")
    assert notifications.unread_count(state.notifications()) == 2
    assert notifications.mark_all_read(state) == 2
    assert notifications.unread_count(state.notifications()) == 0
    assert notifications.mark_all_read(state) == 0


def test_badge_count_only_for_hotels(state):
    notifications.notify(state, "new_requirement", "One", "first")
    state.login_public("Asha", "asha@example.com", "India")
    assert notifications.unread_count_for(state) == 0
    state.login_hotel("The Grand Eatery", "New York, USA", "chef@grandeatery.example")
    assert notifications.unread_count_for(state) == 1


def test_broadcast_requirement_fans_out(food_bank):
    request = broadcast_requirement(food_bank, ["Rice", " ", "Lentils"], "Shelter intake doubled", now=NOW)
    assert request.requested_items == ["Rice", "Lentils"]
    assert request.food_bank_name == "City Harvest"
    assert food_bank.requirement_requests()[0].id == request.id

    notification = food_bank.notifications()[0]
    assert notification.type == "new_requirement"
    assert notification.title == "New Urgent Need from City Harvest"
    assert notification.message == 'Requesting: Rice, Lentils. Message: "Shelter intake doubled"'
    assert notification.read is False


def test_broadcast_requires_items(food_bank):
    with pytest.raises(ValidationError):
        broadcast_requirement(food_bank, ["", "  "], "anything")
    assert food_bank.requirement_requests() == []
    assert food_bank.notifications() == []


def test_only_food_banks_broadcast(hotel):
    with pytest.raises(ValidationError):
        broadcast_requirement(hotel, ["Rice"])
