"""Shopping list — AI suggestions merged with items the user adds by hand.

Regenerating suggestions replaces the previous AI batch but never touches
manual entries.  format_shopping_list() renders the list as plain text for
export/clipboard.
"""

from typing import Optional

from pantrix.core.state import AppState, ValidationError, new_id, require
from pantrix.db.models import ShoppingListItem

MANUAL_REASON = "Manually added"
_EDITABLE = ("name", "quantity", "notes", "checked")


class ShoppingItemNotFoundError(Exception):
    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Shopping list item with ID {item_id} not found")


def merge_ai_suggestions(state: AppState, suggestions: list[dict]) -> list[ShoppingListItem]:
    """Swap the previous AI-generated entries for a new batch of suggestions.

    Each suggestion is {name, quantity, reason}.  Manual items keep their
    place at the front.  Returns the full new list.
    """
    new_items = [
        ShoppingListItem(
            id=new_id("ai"),
            name=s["name"],
            quantity=s.get("quantity") or "",
            reason=s.get("reason") or "",
            checked=False,
            is_ai_generated=True,
        )
        for s in suggestions
        if s.get("name")
    ]
    kept = [i for i in state.shopping_list() if not i.is_ai_generated]
    merged = kept + new_items
    state.save_shopping_list(merged)
    return merged


def add_manual_item(state: AppState, name: str, quantity: str, notes: Optional[str] = None) -> ShoppingListItem:
    item = ShoppingListItem(
        id=new_id("manual"),
        name=require(name, "name", "Item name"),
        quantity=(quantity or "").strip(),
        reason=MANUAL_REASON,
        notes=(notes or "").strip() or None,
        checked=False,
        is_ai_generated=False,
    )
    state.save_shopping_list(state.shopping_list() + [item])
    return item


def update_item(state: AppState, item_id: str, **changes) -> ShoppingListItem:
    """Apply edits (name, quantity, notes, checked) to one entry."""
    unknown = set(changes) - set(_EDITABLE)
    if unknown:
        raise ValidationError(f"Cannot edit field(s): {', '.join(sorted(unknown))}")
    items = state.shopping_list()
    item = next((i for i in items if i.id == item_id), None)
    if item is None:
        raise ShoppingItemNotFoundError(item_id)
    for key, value in changes.items():
        setattr(item, key, value)
    state.save_shopping_list(items)
    return item


def delete_item(state: AppState, item_id: str) -> None:
    items = state.shopping_list()
    remaining = [i for i in items if i.id != item_id]
    if len(remaining) == len(items):
        raise ShoppingItemNotFoundError(item_id)
    state.save_shopping_list(remaining)


def format_shopping_list(items: list[ShoppingListItem]) -> str:
    """Format the shopping list as plain text for export/clipboard."""
    if not items:
        return "No items needed."

    lines = []
    for title, group in (
        ("Suggested", [i for i in items if i.is_ai_generated]),
        ("Added by you", [i for i in items if not i.is_ai_generated]),
    ):
        if not group:
            continue
        lines.append(f"=== {title} ===")
        for item in group:
            box = "[x]" if item.checked else "[ ]"
            parts = [f"  {box} {item.name}"]
            if item.quantity:
                parts.append(f" — {item.quantity}")
            if item.is_ai_generated and item.reason:
                parts.append(f" ({item.reason})")
            if item.notes:
                parts.append(f"  Note: {item.notes}")
            lines.append("".join(parts))
        lines.append("")

    return "\n".join(lines).strip()
