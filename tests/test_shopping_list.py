import pytest

from pantrix.core import shopping_list
from pantrix.core.shopping_list import ShoppingItemNotFoundError
from pantrix.core.state import ValidationError

SUGGESTIONS = [
    {"name": "Tomato sauce", "quantity": "1 jar", "reason": "Pairs with your pasta"},
    {"name": "Bananas", "quantity": "6", "reason": "A healthy staple to have"},
]


def test_regenerating_keeps_manual_items(state):
    manual = shopping_list.add_manual_item(state, "Coffee", "1 bag", notes="Decaf")
    shopping_list.merge_ai_suggestions(state, SUGGESTIONS)
    merged = shopping_list.merge_ai_suggestions(state, [{"name": "Rice", "quantity": "2 lbs", "reason": "Running low"}])
    assert [i.name for i in merged] == ["Coffee", "Rice"]
    assert merged[0].id == manual.id
    assert merged[0].reason == "Manually added"
    assert merged[1].is_ai_generated
    assert [i.name for i in state.shopping_list()] == ["Coffee", "Rice"]


def test_update_and_delete(state):
    item = shopping_list.add_manual_item(state, "Coffee", "1 bag")
    shopping_list.update_item(state, item.id, checked=True, notes="Fair trade")
    stored = state.shopping_list()[0]
    assert stored.checked is True
    assert stored.notes == "Fair trade"
    with pytest.raises(ValidationError):
        shopping_list.update_item(state, item.id, is_ai_generated=True)
    shopping_list.delete_item(state, item.id)
    assert state.shopping_list() == []
    with pytest.raises(ShoppingItemNotFoundError):
        shopping_list.delete_item(state, item.id)


def test_manual_item_needs_a_name(state):
    with pytest.raises(ValidationError):
        shopping_list.add_manual_item(state, " ", "1")


def test_format_shopping_list(state):
    assert shopping_list.format_shopping_list([]) == "No items needed."
    shopping_list.add_manual_item(state, "Coffee", "1 bag", notes="Decaf")
    items = shopping_list.merge_ai_suggestions(state, SUGGESTIONS[:1])
    shopping_list.update_item(state, items[0].id, checked=True)
    text = shopping_list.format_shopping_list(state.shopping_list())
    assert text.splitlines() == [
        "=== Suggested ===",
        "  [ ] Tomato sauce — 1 jar (Pairs with your pasta)",
        "",
        "=== Added by you ===",
        "  [x] Coffee — 1 bag  Note: Decaf",
    ]
