"""
frontend/search_page.py

Composition root for the watch search page.

SearchPage wires the capability tracker, filter state, autocomplete, search
engine, history and results surface for one session, and exposes the event
handlers the rendering layer calls. The renderer reads everything it shows
from the properties here; it never talks to the backend itself.

Usage (inside an async event handler):
    page = SearchPage(WatchService(), session_state=st.session_state)
    await page.load_tiers()   # only hits the backend when the session has no tiers
    await page.handle_change("reference", "126610LN")
    await page.submit()
    page.presentation  # PresentationState(visible=True, results=[...])
"""

from __future__ import annotations

from typing import Any, Dict, List, MutableMapping, Optional, Protocol, Union

import streamlit as st

try:
    from frontend.autocomplete import AutocompleteEngine
    from frontend.capabilities import CapabilityTracker, TierCapabilities
    from frontend.config import AUTOCOMPLETE_MIN_CHARS, REPLAY_REVEAL_DELAY_SECONDS
    from frontend.diagnostics import log_line, track_event
    from frontend.filters import FilterStateManager
    from frontend.history import HistoryRecorder, HistoryStore, SessionHistoryStore
    from frontend.models import FilterState, HistoryEntry, PresentationState, SearchOutcome
    from frontend.presentation import PresentationController
    from frontend.search_engine import SearchBackend, SearchEngine
    from frontend.session import get_current_user, get_tiers, get_user_key, init_session_state, set_tiers
except ModuleNotFoundError:
    from autocomplete import AutocompleteEngine
    from capabilities import CapabilityTracker, TierCapabilities
    from config import AUTOCOMPLETE_MIN_CHARS, REPLAY_REVEAL_DELAY_SECONDS
    from diagnostics import log_line, track_event
    from filters import FilterStateManager
    from history import HistoryRecorder, HistoryStore, SessionHistoryStore
    from models import FilterState, HistoryEntry, PresentationState, SearchOutcome
    from presentation import PresentationController
    from search_engine import SearchBackend, SearchEngine
    from session import get_current_user, get_tiers, get_user_key, init_session_state, set_tiers


class CatalogBackend(SearchBackend, Protocol):
    async def autocomplete(self, partial: str) -> List[str]: ...

    async def fetch_tiers(self) -> List[Dict[str, Any]]: ...


class SearchPage:
    """Search orchestration for one page session."""

    def __init__(
        self,
        backend: CatalogBackend,
        session_state: Optional[MutableMapping[str, Any]] = None,
        history_store: Optional[HistoryStore] = None,
        reveal_delay: float = REPLAY_REVEAL_DELAY_SECONDS,
        autocomplete_min_chars: int = AUTOCOMPLETE_MIN_CHARS,
    ) -> None:
        self._ss = st.session_state if session_state is None else session_state
        self._backend = backend
        init_session_state(self._ss)

        self._tracker = CapabilityTracker()
        self._autocomplete = AutocompleteEngine(
            backend.autocomplete,
            self._current_capabilities,
            session_state=self._ss,
            min_chars=autocomplete_min_chars,
        )
        self._filters = FilterStateManager(self._current_capabilities, self._autocomplete)
        self._presentation = PresentationController()
        if history_store is None:
            history_store = SessionHistoryStore(self._ss, user_key=lambda: get_user_key(self._ss))
        self._history = HistoryRecorder(history_store, lambda: self.capabilities.search_history_limit)
        self._engine = SearchEngine(
            backend,
            self._current_capabilities,
            self._filters,
            self._presentation,
            history=self._history,
            session_state=self._ss,
            reveal_delay=reveal_delay,
        )
        self.sync_session()

    # ------------------------------------------------------------------
    # Session / capabilities
    # ------------------------------------------------------------------

    def _current_capabilities(self) -> TierCapabilities:
        # Plan changes land in session state at any time; the fingerprint
        # check keeps this a no-op while the tier is unchanged
        self.sync_session()
        return self._tracker.capabilities

    @property
    def capabilities(self) -> TierCapabilities:
        return self._current_capabilities()

    def sync_session(self) -> bool:
        """
        Re-read user and tiers from the session; recompute capabilities on change.

        Runs before every capability read, so handlers always see the tier
        currently in session state.
        """
        changed = self._tracker.sync(get_current_user(self._ss), get_tiers(self._ss))
        if changed:
            caps = self._tracker.capabilities
            track_event(self._ss, "capabilities_changed", {
                "advanced_search": caps.advanced_search_enabled,
                "history_limit": caps.search_history_limit,
                "autocomplete": caps.autocomplete_enabled,
            })
            log_line("SEARCH", f"Capabilities now {caps}")
            if not caps.autocomplete_enabled:
                self._autocomplete.invalidate()
            if not caps.advanced_search_enabled:
                self._filters.set_advanced_visible(False)
        return changed

    async def load_tiers(self) -> List[Dict[str, Any]]:
        """
        Fetch the published tier list when the session has none yet.

        A failed fetch leaves the tiers empty (no capabilities) and is recorded
        on the diagnostic timeline; it never reaches the renderer.
        """
        tiers = get_tiers(self._ss)
        if tiers:
            return tiers

        try:
            tiers = await self._backend.fetch_tiers()
        except Exception as e:
            track_event(self._ss, "tiers_failed", {"error": f"{type(e).__name__}: {e}"})
            log_line("SEARCH", f"Tier fetch failed: {e}")
            return []

        set_tiers(tiers, self._ss)
        self.sync_session()
        return tiers

    # ------------------------------------------------------------------
    # Views for the renderer
    # ------------------------------------------------------------------

    @property
    def filters(self) -> FilterState:
        return self._filters.state

    @property
    def suggestions(self) -> List[str]:
        return self._filters.suggestions

    @property
    def show_advanced_toggle(self) -> bool:
        return self.capabilities.advanced_search_enabled

    @property
    def advanced_visible(self) -> bool:
        return self._filters.advanced_visible

    @property
    def show_history(self) -> bool:
        return self.capabilities.history_enabled

    @property
    def history_entries(self) -> List[HistoryEntry]:
        if not self.show_history:
            return []
        return self._history.list_entries()

    @property
    def history_version(self) -> int:
        return self._history.version

    @property
    def presentation(self) -> PresentationState:
        return self._presentation.state

    @property
    def search_state(self):
        return self._engine.state

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def handle_change(self, name: str, value: Any) -> FilterState:
        return await self._filters.change(name, value)

    def select_suggestion(self, suggestion: str) -> FilterState:
        return self._filters.select_suggestion(suggestion)

    def toggle_advanced(self) -> bool:
        return self._filters.toggle_advanced_visible()

    async def submit(self) -> Optional[SearchOutcome]:
        return await self._engine.submit()

    async def repeat_search(self, previous: Union[FilterState, HistoryEntry, Dict[str, Any]]) -> Optional[SearchOutcome]:
        return await self._engine.replay(previous)

    def dismiss_results(self) -> None:
        self._presentation.dismiss()

    def clear_history(self) -> None:
        self._history.clear()

    def close(self) -> None:
        """Teardown: in-flight requests finish but their results are dropped."""
        self._autocomplete.close()
        self._engine.close()
