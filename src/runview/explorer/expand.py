"""Persisted set of expanded node ids."""

from __future__ import annotations

from collections.abc import Iterable

from runview.config.preferences import PreferenceStore


class ExpandState:
    """Ordered set of expanded ids, written through to a PreferenceStore."""

    def __init__(self, store: PreferenceStore | None = None) -> None:
        self._store = store
        initial = store.preferences.expanded if store is not None else []
        self._ids: dict[str, None] = dict.fromkeys(initial)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._ids

    def snapshot(self) -> list[str]:
        return list(self._ids)

    def add(self, node_id: str) -> None:
        if node_id not in self._ids:
            self._ids[node_id] = None
            self._persist()

    def add_many(self, node_ids: Iterable[str]) -> None:
        before = len(self._ids)
        self._ids.update(dict.fromkeys(node_ids))
        if len(self._ids) != before:
            self._persist()

    def discard(self, node_id: str) -> None:
        if node_id in self._ids:
            del self._ids[node_id]
            self._persist()

    def discard_many(self, node_ids: Iterable[str]) -> None:
        removed = False
        for node_id in node_ids:
            if node_id in self._ids:
                del self._ids[node_id]
                removed = True
        if removed:
            self._persist()

    def clear(self) -> None:
        if self._ids:
            self._ids.clear()
            self._persist()

    def _persist(self) -> None:
        if self._store is not None:
            self._store.update(expanded=list(self._ids))
