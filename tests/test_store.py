import logging

import pytest

from pantrix.core.store import INVENTORY, PersistentStore
from pantrix.db.database import get_connection, init_db
from pantrix.db.models import InventoryItem


@pytest.fixture
def store(tmp_path):
    db_file = tmp_path / "store.db"
    init_db(db_file)
    return PersistentStore(db_file)


def _write_raw(store, key, value):
    conn = get_connection(store.db_path)
    try:
        conn.execute("INSERT INTO state (key, value) VALUES (?, ?)", (key, value))
        conn.commit()
    finally:
        conn.close()


def test_missing_key_returns_default(store):
    assert store.get("pantrix-nothing", []) == []
    assert store.get("pantrix-nothing") is None


def test_default_is_not_shared(store):
    default = []
    value = store.get("pantrix-nothing", default)
    value.append("x")
    assert default == []


def test_dataclasses_are_stored_as_dicts(store):
    item = InventoryItem(id="item-1", name="Milk", expiry_date="2024-07-20", quantity="1 Gallon", category="Dairy")
    store.set(INVENTORY, [item])
    assert store.get(INVENTORY, []) == [{
        "id": "item-1", "name": "Milk", "expiry_date": "2024-07-20",
        "quantity": "1 Gallon", "category": "Dairy",
    }]


def test_set_replaces_whole_slice(store):
    store.set(INVENTORY, [{"id": "a"}, {"id": "b"}])
    store.set(INVENTORY, [{"id": "c"}])
    assert store.get(INVENTORY, []) == [{"id": "c"}]


def test_scalars_and_null(store):
    store.set("pantrix-donationCount", 12)
    store.set("pantrix-userType", None)
    assert store.get("pantrix-donationCount", 0) == 12
    assert store.get("pantrix-userType", "public") is None


def test_corrupt_value_falls_back_to_default(store, caplog):
    _write_raw(store, INVENTORY, "{not json")
    with caplog.at_level(logging.WARNING, logger="pantrix.core.store"):
        assert store.get(INVENTORY, []) == []
    assert "Error reading state key 'pantrix-inventory'" in caplog.text


def test_unserializable_value_is_dropped(store, caplog):
    store.set(INVENTORY, [{"id": "kept"}])
    with caplog.at_level(logging.WARNING, logger="pantrix.core.store"):
        store.set(INVENTORY, [object()])
    assert store.get(INVENTORY, []) == [{"id": "kept"}]
    assert "value not persisted" in caplog.text


def test_missing_table_never_raises(tmp_path):
    store = PersistentStore(tmp_path / "uninitialised.db")
    store.set(INVENTORY, [{"id": "a"}])
    assert store.get(INVENTORY, ["fallback"]) == ["fallback"]
    assert store.keys() == []


def test_keys_and_delete(store):
    store.set(INVENTORY, [])
    store.set("pantrix-language", "es")
    assert store.keys() == ["pantrix-inventory", "pantrix-language"]
    store.delete(INVENTORY)
    store.delete("pantrix-never-written")
    assert store.keys() == ["pantrix-language"]
