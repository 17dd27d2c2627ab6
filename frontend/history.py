"""
frontend/history.py

Search history: capacity policy, session-backed store, and the recorder the
search engine calls after a live submit.

Key principles:
- The tier's searchHistoryLimit is the capacity; 0 disables history entirely
- Newest entry first; when full, the oldest entry is evicted first
- The store only persists; trimming is decided here (trim_history)
- Every record/clear bumps a version counter the history view watches
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, MutableMapping, Optional, Protocol

import streamlit as st
from pydantic import ValidationError

try:
    from frontend.models import FilterState, HistoryEntry, SearchMode
    from frontend.diagnostics import log_line
except ModuleNotFoundError:
    from models import FilterState, HistoryEntry, SearchMode
    from diagnostics import log_line


class HistoryStore(Protocol):
    """Persistence contract for search history."""

    def save(self, entry: HistoryEntry, limit: int) -> None: ...

    def load(self) -> List[HistoryEntry]: ...

    def clear(self) -> None: ...


def trim_history(entries: List[HistoryEntry], limit: int) -> List[HistoryEntry]:
    """
    Apply the capacity policy to a newest-first list.

    Args:
        entries: History entries, newest first
        limit: Maximum number of entries to keep

    Returns:
        At most `limit` newest entries ([] if limit <= 0)
    """
    if limit <= 0:
        return []
    return list(entries[:limit])


class SessionHistoryStore:
    """
    History kept in session state, one list per user.

    Entries are stored as plain JSON-ready dicts so the session can be
    snapshotted or exported without pydantic objects in it.
    """

    KEY_PREFIX = "search_history"

    def __init__(
        self,
        session_state: Optional[MutableMapping[str, Any]] = None,
        user_key: Callable[[], str] = lambda: "anonymous",
    ) -> None:
        self._session_state = session_state
        self._user_key = user_key

    @property
    def _ss(self) -> MutableMapping[str, Any]:
        return st.session_state if self._session_state is None else self._session_state

    @property
    def key(self) -> str:
        return f"{self.KEY_PREFIX}:{self._user_key()}"

    def _raw(self) -> List[Dict[str, Any]]:
        raw = self._ss.get(self.key)
        return raw if isinstance(raw, list) else []

    def load(self) -> List[HistoryEntry]:
        entries = []
        for item in self._raw():
            try:
                entries.append(HistoryEntry.model_validate(item))
            except ValidationError:
                # Skip entries written by an incompatible build
                log_line("HISTORY", f"Dropping unreadable entry under {self.key}")
        return entries

    def save(self, entry: HistoryEntry, limit: int) -> None:
        entries = trim_history([entry] + self.load(), limit)
        self._ss[self.key] = [e.to_storage() for e in entries]

    def clear(self) -> None:
        self._ss[self.key] = []


class HistoryRecorder:
    """Records executed searches up to the tier's history limit."""

    def __init__(self, store: HistoryStore, limit_provider: Callable[[], int]) -> None:
        self._store = store
        self._limit_provider = limit_provider
        self.version = 0

    @property
    def limit(self) -> int:
        return max(int(self._limit_provider() or 0), 0)

    @property
    def enabled(self) -> bool:
        return self.limit > 0

    def record(self, filters: FilterState, mode: Optional[SearchMode] = None) -> Optional[HistoryEntry]:
        """
        Save the submitted filters, and the mode they ran in, as the newest entry.

        Returns:
            The stored entry, or None when history is disabled for the tier
        """
        limit = self.limit
        if limit <= 0:
            return None

        entry = HistoryEntry(filters=filters, mode=mode)
        self._store.save(entry, limit)
        self.version += 1
        log_line("HISTORY", f"Recorded search (limit={limit}, version={self.version})")
        return entry

    def list_entries(self) -> List[HistoryEntry]:
        """Stored entries, newest first, never more than the current limit."""
        return trim_history(self._store.load(), self.limit)

    def clear(self) -> None:
        self._store.clear()
        self.version += 1
