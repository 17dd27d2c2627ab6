"""
frontend/autocomplete.py

Live reference suggestions while the user types.

Each keystroke may start a fetch and several can be in flight at once.
Every request takes a sequence number; a response is applied only while its
number is still the latest issued, so a slow early response can never
overwrite a newer one. Fetch failures never reach the user: suggestions
simply become empty.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, List, MutableMapping, Optional

try:
    from frontend.capabilities import TierCapabilities
    from frontend.config import AUTOCOMPLETE_MIN_CHARS
    from frontend.diagnostics import log_line, track_event
except ModuleNotFoundError:
    from capabilities import TierCapabilities
    from config import AUTOCOMPLETE_MIN_CHARS
    from diagnostics import log_line, track_event


AutocompleteFetcher = Callable[[str], Awaitable[List[str]]]


class AutocompleteEngine:
    """Fetches and holds ranked reference suggestions for the current input."""

    def __init__(
        self,
        fetch: AutocompleteFetcher,
        capabilities: Callable[[], TierCapabilities],
        session_state: Optional[MutableMapping[str, Any]] = None,
        min_chars: int = AUTOCOMPLETE_MIN_CHARS,
    ) -> None:
        self._fetch = fetch
        self._capabilities = capabilities
        self._session_state = session_state if session_state is not None else {}
        self.min_chars = min_chars
        self._suggestions: List[str] = []
        self._latest_seq = 0
        self.is_typing = False
        self.closed = False

    @property
    def enabled(self) -> bool:
        return self._capabilities().autocomplete_enabled

    @property
    def suggestions(self) -> List[str]:
        return list(self._suggestions)

    @property
    def visible_suggestions(self) -> List[str]:
        """What the renderer should list: nothing unless the user is typing."""
        if self.enabled and self.is_typing:
            return list(self._suggestions)
        return []

    def should_request(self, partial: str) -> bool:
        return self.enabled and len(partial or "") >= self.min_chars

    def invalidate(self) -> None:
        """Drop suggestions and make every in-flight response stale."""
        self._latest_seq += 1
        self._suggestions = []

    async def request(self, partial: str) -> List[str]:
        """
        Refresh suggestions for a new reference value.

        Below the threshold (or without the capability) suggestions are
        cleared synchronously and no fetch is made.

        Returns:
            The suggestions now held (may be newer than this request's own)
        """
        self.is_typing = True
        self.invalidate()
        seq = self._latest_seq

        if not self.should_request(partial):
            return []

        try:
            fetched = list(await self._fetch(partial))
        except Exception as e:
            track_event(self._session_state, "autocomplete_failed", {
                "partial": partial,
                "error": type(e).__name__,
            })
            log_line("AUTOCOMPLETE", f"Fetch failed for {partial!r}: {type(e).__name__}")
            fetched = []

        if self.closed:
            return []

        if seq != self._latest_seq:
            track_event(self._session_state, "autocomplete_stale", {"partial": partial, "seq": seq})
            return self.suggestions

        self._suggestions = fetched
        return self.suggestions

    def select(self, suggestion: str) -> str:
        """Accept a suggestion: clear the list and stop suggesting until the next edit."""
        self.invalidate()
        self.is_typing = False
        return suggestion

    def close(self) -> None:
        """Page teardown: late responses are discarded."""
        self.closed = True
        self.invalidate()
