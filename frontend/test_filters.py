# frontend/test_filters.py
# Unit tests for filter state and the advanced-panel toggle

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend.autocomplete import AutocompleteEngine
from frontend.capabilities import TierCapabilities
from frontend.filters import FilterStateManager
from frontend.models import FilterState, UnknownFilterError


ADVANCED = TierCapabilities(advanced_search_enabled=True, search_history_limit=0, autocomplete_enabled=True)
BASIC_ONLY = TierCapabilities(advanced_search_enabled=False, search_history_limit=0, autocomplete_enabled=False)


class Caps:
    """Mutable capability holder standing in for the tracker."""

    def __init__(self, caps):
        self.caps = caps

    def __call__(self):
        return self.caps


class RecordingFetcher:
    def __init__(self, suggestions=None):
        self.calls = []
        self.suggestions = suggestions or []

    async def __call__(self, partial):
        self.calls.append(partial)
        return list(self.suggestions)


def test_starts_empty():
    manager = FilterStateManager(Caps(ADVANCED))
    assert manager.state == FilterState()
    assert manager.state.has_any_value() is False
    assert manager.advanced_visible is False


def test_update_field_replaces_only_that_field():
    manager = FilterStateManager(Caps(ADVANCED))
    manager.update_field("reference", "126610LN")
    manager.update_field("color", "Black")

    state = manager.update_field("color", "Blue")

    assert state.reference == "126610LN"
    assert state.color == "Blue"
    assert state.brand == ""


def test_update_field_accepts_camel_case_keys():
    manager = FilterStateManager(Caps(ADVANCED))
    manager.update_field("priceMin", "5000")
    manager.update_field("price_max", "25000")

    assert manager.state.price_min == "5000"
    assert manager.state.price_max == "25000"


def test_update_field_does_not_coerce():
    manager = FilterStateManager(Caps(ADVANCED))
    manager.update_field("year", "20x1")
    assert manager.state.year == "20x1"


def test_update_unknown_field_raises():
    manager = FilterStateManager(Caps(ADVANCED))
    with pytest.raises(UnknownFilterError):
        manager.update_field("strap", "Oyster")
    assert manager.state == FilterState()


def test_snapshots_are_independent():
    manager = FilterStateManager(Caps(ADVANCED))
    before = manager.update_field("reference", "116500")
    manager.update_field("reference", "126710BLRO")
    assert before.reference == "116500"


def test_replace_all_from_mapping():
    manager = FilterStateManager(Caps(ADVANCED))
    manager.update_field("brand", "Rolex")

    state = manager.replace_all({"reference": "5711", "priceMax": "90000"})

    assert state.reference == "5711"
    assert state.price_max == "90000"
    assert state.brand == ""


class TestAdvancedToggle:

    def test_toggle_flips_when_allowed(self):
        manager = FilterStateManager(Caps(ADVANCED))
        assert manager.toggle_advanced_visible() is True
        assert manager.advanced_visible is True
        assert manager.toggle_advanced_visible() is False

    def test_toggle_is_noop_without_capability(self):
        manager = FilterStateManager(Caps(BASIC_ONLY))
        assert manager.toggle_advanced_visible() is False
        assert manager.advanced_visible is False

    def test_toggle_from_previous_tier_is_ignored(self):
        caps = Caps(ADVANCED)
        manager = FilterStateManager(caps)
        manager.toggle_advanced_visible()
        assert manager.advanced_visible is True

        caps.caps = BASIC_ONLY

        assert manager.advanced_visible is False


class TestReferenceAutocomplete:

    def test_reference_change_requests_suggestions(self):
        fetch = RecordingFetcher(["126610LN", "126610LV"])
        caps = Caps(ADVANCED)
        manager = FilterStateManager(caps, AutocompleteEngine(fetch, caps))

        asyncio.run(manager.change("reference", "1266"))

        assert fetch.calls == ["1266"]
        assert manager.suggestions == ["126610LN", "126610LV"]

    def test_other_fields_do_not_trigger_autocomplete(self):
        fetch = RecordingFetcher(["x"])
        caps = Caps(ADVANCED)
        manager = FilterStateManager(caps, AutocompleteEngine(fetch, caps))

        asyncio.run(manager.change("color", "Black"))

        assert fetch.calls == []
        assert manager.state.color == "Black"

    def test_select_suggestion_writes_reference_and_clears(self):
        fetch = RecordingFetcher(["126610LN"])
        caps = Caps(ADVANCED)
        manager = FilterStateManager(caps, AutocompleteEngine(fetch, caps))
        asyncio.run(manager.change("reference", "1266"))

        state = manager.select_suggestion("126610LN")

        assert state.reference == "126610LN"
        assert manager.suggestions == []
        assert fetch.calls == ["1266"]


def test_filter_state_normalizes_scalars():
    state = FilterState(year=2021, price_min=5000.5, brand=None)
    assert state.year == "2021"
    assert state.price_min == "5000.5"
    assert state.brand == ""


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
