"""
frontend/test_capabilities.py

Regression tests for tier-based capability resolution.

Tests:
1. Tier flags map onto search capabilities
2. Absent tier / unset fields default to off
3. The user's tier is found by planId
4. CapabilityTracker recomputes only when the tier reference changes

Run:
    pytest frontend/test_capabilities.py -v
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend.capabilities import (
    NO_CAPABILITIES,
    CapabilityTracker,
    TierCapabilities,
    find_user_tier,
    resolve_capabilities,
)
from frontend.models import UserTier


TIERS = [
    {"id": "free", "advancedSearch": False, "searchHistoryLimit": 0, "autocompleteReference": False},
    {"id": "collector", "advancedSearch": False, "searchHistoryLimit": 2, "autocompleteReference": True},
    {"id": "pro", "advancedSearch": True, "searchHistoryLimit": 10, "autocompleteReference": True},
]


class TestResolveCapabilities:
    """Mapping from tier definition to capability tuple."""

    def test_full_tier(self):
        caps = resolve_capabilities(TIERS[2])
        assert caps == TierCapabilities(
            advanced_search_enabled=True,
            search_history_limit=10,
            autocomplete_enabled=True,
        )
        assert caps.history_enabled is True

    def test_accepts_user_tier_model(self):
        tier = UserTier(id="collector", advanced_search=False, search_history_limit=2, autocomplete_reference=True)
        caps = resolve_capabilities(tier)
        assert caps.search_history_limit == 2
        assert caps.autocomplete_enabled is True
        assert caps.advanced_search_enabled is False

    def test_absent_tier_is_all_off(self):
        assert resolve_capabilities(None) == NO_CAPABILITIES
        assert NO_CAPABILITIES.advanced_search_enabled is False
        assert NO_CAPABILITIES.search_history_limit == 0
        assert NO_CAPABILITIES.autocomplete_enabled is False

    def test_unset_fields_default_off(self):
        caps = resolve_capabilities({"id": "legacy"})
        assert caps == NO_CAPABILITIES

    def test_negative_history_limit_is_zero(self):
        caps = resolve_capabilities({"id": "odd", "searchHistoryLimit": -3})
        assert caps.search_history_limit == 0
        assert caps.history_enabled is False

    def test_malformed_tier_is_all_off(self):
        # no id at all
        assert resolve_capabilities({"advancedSearch": True}) == NO_CAPABILITIES


class TestFindUserTier:

    def test_matches_plan_id(self):
        tier = find_user_tier({"id": 7, "planId": "pro"}, TIERS)
        assert tier is not None
        assert tier.id == "pro"

    def test_plan_id_compared_as_text(self):
        tiers = [{"id": 2, "advancedSearch": True}]
        assert find_user_tier({"planId": "2"}, tiers).id == 2

    def test_snake_case_plan_id_fallback(self):
        assert find_user_tier({"plan_id": "collector"}, TIERS).id == "collector"

    @pytest.mark.parametrize("user,tiers", [
        (None, TIERS),
        ({"id": 1}, TIERS),
        ({"planId": "gold"}, TIERS),
        ({"planId": "pro"}, []),
        ({"planId": "pro"}, None),
    ])
    def test_unresolved(self, user, tiers):
        assert find_user_tier(user, tiers) is None


class TestCapabilityTracker:
    """Capabilities follow the session's tier reference."""

    def test_initial_sync_resolves(self):
        tracker = CapabilityTracker()
        assert tracker.capabilities == NO_CAPABILITIES

        changed = tracker.sync({"planId": "pro"}, TIERS)

        assert changed is True
        assert tracker.capabilities.advanced_search_enabled is True
        assert tracker.version == 1

    def test_same_tier_does_not_recompute(self):
        tracker = CapabilityTracker()
        tracker.sync({"planId": "pro"}, TIERS)

        # a fresh but equal tier list is not a change
        changed = tracker.sync({"planId": "pro"}, [dict(t) for t in TIERS])

        assert changed is False
        assert tracker.version == 1

    def test_plan_change_recomputes(self):
        tracker = CapabilityTracker()
        tracker.sync({"planId": "pro"}, TIERS)

        assert tracker.sync({"planId": "free"}, TIERS) is True
        assert tracker.capabilities.advanced_search_enabled is False
        assert tracker.version == 2

    def test_tier_definition_edit_recomputes(self):
        tracker = CapabilityTracker()
        tracker.sync({"planId": "collector"}, TIERS)

        edited = [dict(t) for t in TIERS]
        edited[1]["searchHistoryLimit"] = 5

        assert tracker.sync({"planId": "collector"}, edited) is True
        assert tracker.capabilities.search_history_limit == 5

    def test_logout_turns_everything_off(self):
        tracker = CapabilityTracker()
        tracker.sync({"planId": "pro"}, TIERS)

        assert tracker.sync(None, TIERS) is True
        assert tracker.capabilities == NO_CAPABILITIES
        assert tracker.tier is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
