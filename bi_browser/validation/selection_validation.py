from __future__ import annotations

import logging

from bi_browser.core.dataset import Dataset
from bi_browser.core.selection import SelectionSnapshot

logger = logging.getLogger(__name__)


def sanitise_snapshot(snapshot: SelectionSnapshot, dataset: Dataset) -> SelectionSnapshot:
    """
    Drop restored selections that no longer match the dataset: unknown fields
    and values that do not occur in their field. Used when a persisted
    snapshot is loaded against a (possibly regenerated) dataset.
    """
    valid = dataset.valid_sets()
    cleaned = {}
    dropped = {}

    for field, values in snapshot.items():
        allowed = valid.get(field, frozenset())
        kept = values & allowed
        if kept:
            cleaned[field] = kept
        if kept != values:
            dropped[field] = len(values - kept)

    if not dropped:
        return snapshot

    logger.warning(
        "Dropped stale selections",
        extra={"dataset": dataset.name, "dropped": dropped},
    )
    return SelectionSnapshot(cleaned)
