"""
frontend/filters.py

Owns the mutable search criteria and the advanced-panel toggle.

Field updates are atomic: each replaces one field of an immutable
FilterState snapshot. Nothing is coerced here; numbers stay as typed until a
query is built.
"""

from __future__ import annotations

from typing import Any, Callable, List, Mapping, Optional, Union

try:
    from frontend.autocomplete import AutocompleteEngine
    from frontend.capabilities import TierCapabilities
    from frontend.models import FilterState, resolve_filter_key
except ModuleNotFoundError:
    from autocomplete import AutocompleteEngine
    from capabilities import TierCapabilities
    from models import FilterState, resolve_filter_key


class FilterStateManager:
    """Current filters, the advanced toggle, and the reference-to-autocomplete hook."""

    def __init__(
        self,
        capabilities: Callable[[], TierCapabilities],
        autocomplete: Optional[AutocompleteEngine] = None,
    ) -> None:
        self._capabilities = capabilities
        self._autocomplete = autocomplete
        self._state = FilterState()
        self._advanced_toggle = False

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def advanced_allowed(self) -> bool:
        return self._capabilities().advanced_search_enabled

    @property
    def advanced_visible(self) -> bool:
        """Panel is open only if the tier allows it; a toggle left over from another tier does not count."""
        return self.advanced_allowed and self._advanced_toggle

    def update_field(self, name: str, value: Any) -> FilterState:
        """
        Replace one filter field.

        Raises:
            UnknownFilterError: if name is not a filter key
        """
        self._state = self._state.with_field(name, value)
        return self._state

    async def change(self, name: str, value: Any) -> FilterState:
        """
        Apply a user edit; a reference edit also refreshes suggestions.
        """
        state = self.update_field(name, value)
        if self._autocomplete is not None and resolve_filter_key(name) == "reference":
            await self._autocomplete.request(state.reference)
        return state

    def replace_all(self, new_state: Union[FilterState, Mapping[str, Any]]) -> FilterState:
        if not isinstance(new_state, FilterState):
            new_state = FilterState.model_validate(dict(new_state))
        self._state = new_state
        return self._state

    def toggle_advanced_visible(self) -> bool:
        """
        Flip the advanced panel.

        Returns:
            The effective visibility (always False without the capability)
        """
        if not self.advanced_allowed:
            return False
        self._advanced_toggle = not self._advanced_toggle
        return self.advanced_visible

    def set_advanced_visible(self, visible: bool) -> None:
        self._advanced_toggle = bool(visible) and self.advanced_allowed

    def select_suggestion(self, suggestion: str) -> FilterState:
        """Write a picked suggestion into reference without re-triggering autocomplete."""
        if self._autocomplete is not None:
            self._autocomplete.select(suggestion)
        return self.update_field("reference", suggestion)

    @property
    def suggestions(self) -> List[str]:
        if self._autocomplete is None:
            return []
        return self._autocomplete.visible_suggestions
