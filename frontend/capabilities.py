"""
frontend/capabilities.py

Tier-aware capability resolution for the search page.

This module centralizes the logic for:
- Finding the current user's tier in the published tier list
- Deriving the search capabilities that tier grants
- Recomputing capabilities whenever the tier reference changes

Key principles:
- Absent tier (anonymous, unresolved plan) = every capability off
- Unset or malformed tier fields = that capability off / zero
- Capabilities are derived, never set by hand

Pure Python logic - no Streamlit imports, no network access.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

try:
    from frontend.models import UserTier
except ModuleNotFoundError:
    from models import UserTier


TierLike = Union[UserTier, Mapping[str, Any]]


# ============================================================================
# Capability Data Model
# ============================================================================

@dataclass(frozen=True)
class TierCapabilities:
    """Search features a tier grants."""
    advanced_search_enabled: bool = False
    search_history_limit: int = 0
    autocomplete_enabled: bool = False

    @property
    def history_enabled(self) -> bool:
        return self.search_history_limit > 0


NO_CAPABILITIES = TierCapabilities()


# ============================================================================
# Resolution
# ============================================================================

def _coerce_tier(tier: Optional[TierLike]) -> Optional[UserTier]:
    if tier is None or isinstance(tier, UserTier):
        return tier
    try:
        return UserTier.model_validate(dict(tier))
    except ValidationError:
        return None


def _history_limit(value: Any) -> int:
    try:
        limit = int(value or 0)
    except (TypeError, ValueError):
        return 0
    return max(limit, 0)


def resolve_capabilities(tier: Optional[TierLike]) -> TierCapabilities:
    """
    Compute search capabilities for a tier.

    Args:
        tier: UserTier, raw tier dict from the account service, or None

    Returns:
        TierCapabilities (never None); all off when the tier is absent
    """
    resolved = _coerce_tier(tier)
    if resolved is None:
        return NO_CAPABILITIES

    return TierCapabilities(
        advanced_search_enabled=bool(resolved.advanced_search),
        search_history_limit=_history_limit(resolved.search_history_limit),
        autocomplete_enabled=bool(resolved.autocomplete_reference),
    )


def find_user_tier(
    user: Optional[Mapping[str, Any]],
    tiers: Optional[Iterable[TierLike]],
) -> Optional[UserTier]:
    """
    Find the tier matching the user's plan.

    Args:
        user: Current user dict (reads "planId", falls back to "plan_id")
        tiers: Tier definitions published by the account service

    Returns:
        The matching UserTier, or None if the user or plan is unknown
    """
    if not user or not tiers:
        return None

    plan_id = user.get("planId", user.get("plan_id"))
    if plan_id is None:
        return None

    for raw in tiers:
        tier = _coerce_tier(raw)
        if tier is not None and str(tier.id) == str(plan_id):
            return tier
    return None


# ============================================================================
# Reactive recomputation
# ============================================================================

def tier_fingerprint(tier: Optional[UserTier]) -> str:
    """Short stable hash of a tier reference (None hashes too)."""
    data = tier.model_dump() if tier is not None else None
    json_str = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(json_str.encode()).hexdigest()[:12]


class CapabilityTracker:
    """
    Keeps capabilities in step with the session's tier reference.

    Call sync() whenever the session may have changed (login, logout, plan
    change); capabilities are recomputed only when the tier reference did.
    """

    def __init__(self) -> None:
        self._fingerprint: Optional[str] = None
        self._tier: Optional[UserTier] = None
        self._capabilities = NO_CAPABILITIES
        self.version = 0

    @property
    def tier(self) -> Optional[UserTier]:
        return self._tier

    @property
    def capabilities(self) -> TierCapabilities:
        return self._capabilities

    def sync(
        self,
        user: Optional[Mapping[str, Any]],
        tiers: Optional[Iterable[TierLike]],
    ) -> bool:
        """
        Re-resolve the user's tier and recompute capabilities if it changed.

        Returns:
            True if the tier reference changed since the last sync
        """
        tier = find_user_tier(user, tiers)
        fingerprint = tier_fingerprint(tier)
        if fingerprint == self._fingerprint:
            return False

        self._fingerprint = fingerprint
        self._tier = tier
        self._capabilities = resolve_capabilities(tier)
        self.version += 1
        return True
