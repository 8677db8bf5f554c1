from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional

from .values import sort_values

logger = logging.getLogger(__name__)


class SelectionSnapshot(Mapping[str, FrozenSet[Any]]):
    """
    Immutable point-in-time view of all active selections.

    Maps a field name to the frozenset of values selected in that field.

    - A field that is absent means "no constraint from this field"; empty sets
      are never stored.
    - Field order is insertion order (first-selected-first). A field that is
      cleared and selected again moves to the end.
    - Equality is by membership (Mapping semantics), so two snapshots built
      through different toggle sequences compare equal when they select the
      same values.

    Every mutation returns a new snapshot; existing snapshots never change.
    """

    __slots__ = ("_selections",)

    def __init__(self, selections: Optional[Mapping[str, Iterable[Any]]] = None):
        cleaned: Dict[str, FrozenSet[Any]] = {}
        for field, values in (selections or {}).items():
            frozen = frozenset(values)
            if frozen:
                cleaned[field] = frozen
        self._selections = cleaned

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------
    def __getitem__(self, field: str) -> FrozenSet[Any]:
        return self._selections[field]

    def __iter__(self) -> Iterator[str]:
        return iter(self._selections)

    def __len__(self) -> int:
        return len(self._selections)

    def __hash__(self) -> int:
        return hash(frozenset(self._selections.items()))

    def __repr__(self) -> str:
        inner = ", ".join(f"{f!r}: {set(v)!r}" for f, v in self._selections.items())
        return f"SelectionSnapshot({{{inner}}})"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def selected(self, field: str) -> FrozenSet[Any]:
        """Selected values for a field (empty if the field is unconstrained)."""
        return self._selections.get(field, frozenset())

    def is_selected(self, field: str, value: Any) -> bool:
        return value in self.selected(field)

    def active_fields(self) -> List[str]:
        return list(self._selections)

    def without(self, field: str) -> SelectionSnapshot:
        """The constraints of every other field."""
        if field not in self._selections:
            return self
        return SelectionSnapshot({f: v for f, v in self._selections.items() if f != field})

    # ------------------------------------------------------------------
    # Copy-on-write mutations
    # ------------------------------------------------------------------
    def toggle(self, field: str, value: Any) -> SelectionSnapshot:
        """Add value to the field's selection, or remove it if already selected."""
        current = self.selected(field)
        updated = current - {value} if value in current else current | {value}

        selections = dict(self._selections)
        if updated:
            selections[field] = updated
        else:
            selections.pop(field, None)
        return SelectionSnapshot(selections)

    def clear_field(self, field: str) -> SelectionSnapshot:
        return self.without(field)

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, List[Any]]:
        """JSON-friendly form: field -> values in canonical order."""
        return {field: sort_values(values) for field, values in self._selections.items()}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> SelectionSnapshot:
        if not data:
            return cls()
        selections: Dict[str, List[Any]] = {}
        for field, values in data.items():
            if isinstance(values, (list, tuple, set, frozenset)):
                selections[str(field)] = list(values)
            else:
                logger.warning(
                    "Ignoring malformed selection entry",
                    extra={"field": str(field), "value_type": type(values).__name__},
                )
        return cls(selections)


EMPTY_SNAPSHOT = SelectionSnapshot()


class SelectionPersistence(ABC):
    """
    Adapter for saving/restoring the selection state (Local, browser storage, etc.).
    """

    @abstractmethod
    def load(self) -> SelectionSnapshot:
        pass

    @abstractmethod
    def save(self, snapshot: SelectionSnapshot) -> None:
        pass


class SelectionStore:
    """
    Holds the authoritative SelectionSnapshot.

    All mutation goes through toggle/clear_field/clear_all, each of which swaps
    in a brand-new snapshot, so readers holding the previous snapshot never see
    a partial update. If a persistence adapter is attached, the store is seeded
    from it and every new snapshot is saved to it.
    """

    def __init__(
            self,
            snapshot: Optional[SelectionSnapshot] = None,
            *,
            persistence: Optional[SelectionPersistence] = None,
    ):
        self._persistence = persistence
        if snapshot is None:
            snapshot = persistence.load() if persistence is not None else EMPTY_SNAPSHOT
        self._snapshot = snapshot

    @property
    def snapshot(self) -> SelectionSnapshot:
        return self._snapshot

    def _commit(self, snapshot: SelectionSnapshot) -> SelectionSnapshot:
        self._snapshot = snapshot
        if self._persistence is not None:
            try:
                self._persistence.save(snapshot)
            except Exception:
                logger.exception("Failed to persist selection state")
        return snapshot

    def toggle(self, field: str, value: Any) -> SelectionSnapshot:
        logger.debug("Toggling selection", extra={"field": field, "value": str(value)})
        return self._commit(self._snapshot.toggle(field, value))

    def clear_field(self, field: str) -> SelectionSnapshot:
        if field not in self._snapshot:
            return self._snapshot
        return self._commit(self._snapshot.clear_field(field))

    def clear_all(self) -> SelectionSnapshot:
        return self._commit(EMPTY_SNAPSHOT)

    def restore(self, snapshot: SelectionSnapshot) -> SelectionSnapshot:
        """Replace the whole selection state (e.g. a sanitised or imported snapshot)."""
        return self._commit(snapshot)

    def get_active_fields(self) -> List[str]:
        """Fields with a non-empty selection, first-selected-first."""
        return self._snapshot.active_fields()
