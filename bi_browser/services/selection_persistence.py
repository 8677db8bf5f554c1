from __future__ import annotations

import json
import logging

from bi_browser.core.selection import SelectionPersistence, SelectionSnapshot
from bi_browser.services.storage import StorageBackend

logger = logging.getLogger(__name__)

DEFAULT_SELECTIONS_PATH = "selections.json"


class StorageSelectionPersistence(SelectionPersistence):
    """
    Saves the selection snapshot as a JSON object (field -> list of values)
    through a StorageBackend.
    """

    def __init__(self, storage: StorageBackend, path: str = DEFAULT_SELECTIONS_PATH):
        self.storage = storage
        self.path = path

    def load(self) -> SelectionSnapshot:
        """Load the stored snapshot; missing or unreadable state loads as empty."""
        if not self.storage.exists(self.path):
            return SelectionSnapshot()
        try:
            data = json.loads(self.storage.read_bytes(self.path))
        except Exception:
            logger.exception("Failed to load selections from %s", self.path)
            return SelectionSnapshot()

        if not isinstance(data, dict):
            logger.warning("Stored selections are not a JSON object; ignoring", extra={"path": self.path})
            return SelectionSnapshot()
        return SelectionSnapshot.from_dict(data)

    def save(self, snapshot: SelectionSnapshot) -> None:
        json_bytes = json.dumps(snapshot.to_dict(), indent=2).encode("utf-8")
        self.storage.write_bytes(self.path, json_bytes)
