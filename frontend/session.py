"""
frontend/session.py
Read access to the session/tier state the search page depends on.

The account layer owns login and plan changes; it writes the current user and
the published tier list into session state. The search core reads them and
only writes the tier list when it had to fetch it itself:
- init_session_state(): ensures the keys exist on every rerun
- set_session() / clear_session(): used by the account layer (and tests)
- set_tiers(): fills in the public tier list when the account layer has not
- get_current_user() / get_tiers(): what the capability tracker consumes

Every helper takes the session mapping explicitly and falls back to
st.session_state, so the same code runs inside Streamlit and in plain tests.
"""

from typing import Any, Dict, List, MutableMapping, Optional

import streamlit as st


def _ss(session_state: Optional[MutableMapping[str, Any]]) -> MutableMapping[str, Any]:
    return st.session_state if session_state is None else session_state


def init_session_state(session_state: Optional[MutableMapping[str, Any]] = None) -> None:
    """
    Initialize session keys read by the search page.

    This is idempotent - safe to call multiple times.
    """
    ss = _ss(session_state)
    ss.setdefault("current_user", None)
    ss.setdefault("tiers", [])


def set_session(
    current_user: Dict[str, Any],
    tiers: List[Dict[str, Any]],
    session_state: Optional[MutableMapping[str, Any]] = None,
) -> None:
    """
    Set the current user and tier definitions after login or plan change.

    Args:
        current_user: User object (must include "id" and "planId")
        tiers: Tier definitions ({id, advancedSearch, searchHistoryLimit, autocompleteReference})
    """
    ss = _ss(session_state)
    ss["current_user"] = current_user
    ss["tiers"] = list(tiers)


def clear_session(session_state: Optional[MutableMapping[str, Any]] = None) -> None:
    """Clear user state on logout. Tier definitions are public and stay."""
    ss = _ss(session_state)
    ss["current_user"] = None


def set_tiers(tiers: List[Dict[str, Any]], session_state: Optional[MutableMapping[str, Any]] = None) -> None:
    """Store the published tier list (fetched by the page when the session has none)."""
    _ss(session_state)["tiers"] = list(tiers)


def get_current_user(session_state: Optional[MutableMapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
    return _ss(session_state).get("current_user")


def get_tiers(session_state: Optional[MutableMapping[str, Any]] = None) -> List[Dict[str, Any]]:
    return _ss(session_state).get("tiers") or []


def get_user_key(session_state: Optional[MutableMapping[str, Any]] = None) -> str:
    """
    Stable per-user key for user-scoped state (search history).

    Returns:
        The user id as a string, or "anonymous"
    """
    user = get_current_user(session_state)
    if user and isinstance(user, dict) and user.get("id") is not None:
        return str(user["id"])
    return "anonymous"
