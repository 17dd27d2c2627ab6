"""
frontend/search_engine.py

Search execution: mode selection, query building, dispatch, and outcome
handling for live submits and history replays.

Rules:
- Advanced mode requires BOTH the tier capability AND the open panel (live
  submit) or the mode the history entry was recorded with (replay)
- Basic mode sends only the reference; an empty reference is a no-op
- Numeric filters are coerced at build time; malformed input becomes None
- Backend failures never propagate: the results surface opens empty and the
  failure goes to the diagnostic timeline
"""

from __future__ import annotations

import asyncio
import math
from typing import Any, Awaitable, Callable, Dict, List, MutableMapping, Optional, Protocol, Union

try:
    from frontend.capabilities import TierCapabilities
    from frontend.config import REPLAY_REVEAL_DELAY_SECONDS
    from frontend.diagnostics import log_line, track_event
    from frontend.filters import FilterStateManager
    from frontend.history import HistoryRecorder
    from frontend.models import (
        AdvancedQuery,
        BasicQuery,
        FilterState,
        HistoryEntry,
        ResultRecord,
        SearchMode,
        SearchOutcome,
        SearchQuery,
        SearchState,
    )
    from frontend.presentation import PresentationController
except ModuleNotFoundError:
    from capabilities import TierCapabilities
    from config import REPLAY_REVEAL_DELAY_SECONDS
    from diagnostics import log_line, track_event
    from filters import FilterStateManager
    from history import HistoryRecorder
    from models import (
        AdvancedQuery,
        BasicQuery,
        FilterState,
        HistoryEntry,
        ResultRecord,
        SearchMode,
        SearchOutcome,
        SearchQuery,
        SearchState,
    )
    from presentation import PresentationController


# Filters that only an advanced query carries (reference is shared by both modes)
ADVANCED_QUERY_FIELDS = ("condition", "color", "year", "price_min", "price_max")


class SearchBackend(Protocol):
    async def search_watches(self, payload: Dict[str, Any]) -> List[ResultRecord]: ...

    async def get_watch_by_reference(self, reference: str) -> List[ResultRecord]: ...


# ============================================================================
# Coercion + query building
# ============================================================================

def _numeric_text(value: Any) -> str:
    text = str(value).strip() if value is not None else ""
    # int()/float() accept "1_000"; form input never produces it
    return "" if "_" in text else text


def parse_int(value: Any) -> Optional[int]:
    """"2022" -> 2022; "", "20x", "2021.5", "2_022" -> None."""
    text = _numeric_text(value)
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def parse_float(value: Any) -> Optional[float]:
    """"5000.5" -> 5000.5; "", "abc", "nan", "inf", "1_000" -> None."""
    text = _numeric_text(value)
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def select_mode(capabilities: TierCapabilities, advanced_visible: bool) -> SearchMode:
    if capabilities.advanced_search_enabled and advanced_visible:
        return SearchMode.ADVANCED
    return SearchMode.BASIC


def derive_replay_mode(
    capabilities: TierCapabilities,
    filters: FilterState,
    recorded_mode: Optional[SearchMode] = None,
) -> SearchMode:
    """
    Mode for a replayed search, independent of the current panel.

    The mode recorded with the history entry wins; filters without one
    (older entries, plain mappings) are advanced when any advanced-only
    field is filled. Advanced always requires the current capability.
    """
    if not capabilities.advanced_search_enabled:
        return SearchMode.BASIC
    if recorded_mode is not None:
        return SearchMode(recorded_mode)
    if any(getattr(filters, f) for f in ADVANCED_QUERY_FIELDS):
        return SearchMode.ADVANCED
    return SearchMode.BASIC


def build_query(filters: FilterState, mode: SearchMode) -> SearchQuery:
    if mode is SearchMode.BASIC:
        return BasicQuery(reference=filters.reference)

    return AdvancedQuery(
        reference_code=filters.reference,
        color_dial=filters.color,
        year=parse_int(filters.year),
        condition=filters.condition,
        min_price=parse_float(filters.price_min),
        max_price=parse_float(filters.price_max),
    )


# ============================================================================
# Engine
# ============================================================================

class SearchEngine:
    """
    Runs one search per submit/replay and drives the results surface.

    The state machine (IDLE -> RUNNING -> SUCCEEDED|FAILED -> IDLE) is per
    invocation: each outcome carries its own `transitions`, so overlapping
    searches never share a log. `state` is RUNNING while any search is in
    flight.
    """

    def __init__(
        self,
        backend: SearchBackend,
        capabilities: Callable[[], TierCapabilities],
        filters: FilterStateManager,
        presentation: PresentationController,
        history: Optional[HistoryRecorder] = None,
        session_state: Optional[MutableMapping[str, Any]] = None,
        reveal_delay: float = REPLAY_REVEAL_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._backend = backend
        self._capabilities = capabilities
        self._filters = filters
        self._presentation = presentation
        self._history = history
        self._session_state = session_state if session_state is not None else {}
        self.reveal_delay = max(float(reveal_delay or 0), 0.0)
        self._sleep = sleep
        self._in_flight = 0
        self.last_query: Optional[SearchQuery] = None
        self.last_outcome: Optional[SearchOutcome] = None
        self.closed = False

    @property
    def state(self) -> SearchState:
        return SearchState.RUNNING if self._in_flight else SearchState.IDLE

    async def _dispatch(self, query: SearchQuery) -> SearchOutcome:
        transitions = [SearchState.RUNNING]
        self._in_flight += 1
        self.last_query = query

        try:
            if isinstance(query, AdvancedQuery):
                results = await self._backend.search_watches(query.to_payload())
            else:
                results = await self._backend.get_watch_by_reference(query.reference)
            outcome = SearchOutcome.from_results(query.mode, results)
        except Exception as e:
            outcome = SearchOutcome.failure(query.mode, f"{type(e).__name__}: {e}")
            track_event(self._session_state, "search_failed", {
                "mode": query.mode.value,
                "error": outcome.error,
            })
            log_line("SEARCH", f"Search error ({query.mode.value}): {outcome.error}")
        finally:
            self._in_flight -= 1

        transitions.append(SearchState.FAILED if outcome.failed else SearchState.SUCCEEDED)
        transitions.append(SearchState.IDLE)
        outcome = outcome.model_copy(update={"transitions": transitions})
        self.last_outcome = outcome
        return outcome

    def _prepare(self, filters: FilterState, mode: SearchMode) -> Optional[SearchQuery]:
        if not filters.has_any_value():
            return None
        if mode is SearchMode.BASIC and not filters.reference:
            return None
        return build_query(filters, mode)

    async def submit(self) -> Optional[SearchOutcome]:
        """
        Run a live search from the current filters.

        Returns:
            The outcome, or None when the submission was a no-op
        """
        filters = self._filters.state
        mode = select_mode(self._capabilities(), self._filters.advanced_visible)
        query = self._prepare(filters, mode)
        if query is None:
            return None

        outcome = await self._dispatch(query)
        if self.closed:
            return outcome

        if not outcome.failed and self._history is not None:
            self._history.record(filters, mode)

        self._presentation.open(outcome.results)
        log_line("SEARCH", f"{mode.value} search -> {outcome.status.value} ({len(outcome.results)} results)")
        return outcome

    async def replay(self, previous: Union[FilterState, HistoryEntry, Dict[str, Any]]) -> Optional[SearchOutcome]:
        """
        Repeat a past search.

        The filters are restored first, the mode comes from the history entry
        (or the restored fields), and the results are revealed after
        `reveal_delay` seconds. Replays are not recorded in history.
        """
        recorded_mode = None
        if isinstance(previous, HistoryEntry):
            recorded_mode = previous.mode
            previous = previous.filters
        restored = self._filters.replace_all(previous)

        mode = derive_replay_mode(self._capabilities(), restored, recorded_mode)
        self._filters.set_advanced_visible(mode is SearchMode.ADVANCED)

        query = self._prepare(restored, mode)
        if query is None:
            return None

        outcome = await self._dispatch(query)
        if self.closed:
            return outcome

        if outcome.failed:
            self._presentation.open([])
            return outcome

        self._presentation.assign(outcome.results)
        if self.reveal_delay > 0:
            await self._sleep(self.reveal_delay)
            if self.closed:
                return outcome
        self._presentation.open()
        return outcome

    def close(self) -> None:
        self.closed = True
