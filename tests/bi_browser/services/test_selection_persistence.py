import json

from bi_browser.core.selection import SelectionSnapshot, SelectionStore
from bi_browser.services.selection_persistence import StorageSelectionPersistence
from bi_browser.services.storage import InMemoryStorage, LocalFileSystemStorage


def test_store_survives_restart(tmp_path):
    storage = LocalFileSystemStorage(tmp_path)

    store = SelectionStore(persistence=StorageSelectionPersistence(storage))
    store.toggle("Region", "North")
    store.toggle("Region", "South")
    store.toggle("Sales", 100)

    raw = json.loads(storage.read_bytes("selections.json"))
    assert raw == {"Region": ["North", "South"], "Sales": [100]}

    reopened = SelectionStore(persistence=StorageSelectionPersistence(storage))
    assert reopened.snapshot == SelectionSnapshot({"Region": ["North", "South"], "Sales": [100]})


def test_missing_or_corrupt_state_loads_empty():
    storage = InMemoryStorage()
    persistence = StorageSelectionPersistence(storage, path="sel.json")
    assert persistence.load() == SelectionSnapshot()

    storage.write_bytes("sel.json", b"{not json")
    assert persistence.load() == SelectionSnapshot()

    storage.write_bytes("sel.json", b"[1, 2]")
    assert persistence.load() == SelectionSnapshot()
