"""
frontend/api_client.py
Centralized client for the watch catalog backend.

This module ensures:
1. All catalog calls go through one request function (api_request)
2. Every transport problem surfaces as a TransportError subclass, never as a
   raw requests exception and never as a user-facing message
3. The catalog URL comes from config.get_catalog_url (validated per environment)
4. Async callers never block the event loop (WatchService runs the blocking
   requests call in a worker thread)
"""

import asyncio
from typing import Any, Dict, List, Literal, Optional
from urllib.parse import quote

import requests

try:
    from frontend.config import get_catalog_url, REQUEST_TIMEOUT_SECONDS
    from frontend.diagnostics import log_line
except ModuleNotFoundError:
    from config import get_catalog_url, REQUEST_TIMEOUT_SECONDS
    from diagnostics import log_line


__all__ = [
    "TransportError",
    "BackendTimeoutError",
    "BackendUnavailableError",
    "api_request",
    "WatchService",
]


class TransportError(Exception):
    """Raised when a backend call fails for any transport reason."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendTimeoutError(TransportError):
    """The backend did not answer within the request timeout."""
    pass


class BackendUnavailableError(TransportError):
    """The backend could not be reached (DNS, refused, reset)."""
    pass


def _sanitize(error_msg: str) -> str:
    # Never echo credentials that may be embedded in exception text
    if "bearer" in error_msg.lower() or "authorization" in error_msg.lower():
        return "Authentication error (details hidden for security)"
    return error_msg[:200]


def api_request(
    method: Literal["GET", "POST"],
    path: str,
    json: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: int = REQUEST_TIMEOUT_SECONDS,
    auth_token: Optional[str] = None,
) -> Any:
    """
    Make a catalog API request and return the decoded JSON body.

    Args:
        method: HTTP method (GET or POST)
        path: API endpoint path (e.g., "/watches/search")
        json: JSON body for POST requests
        params: Query parameters
        timeout: Request timeout in seconds
        auth_token: Bearer token to attach, if the session has one

    Returns:
        Decoded JSON body

    Raises:
        BackendTimeoutError: request timed out
        BackendUnavailableError: connection failed
        TransportError: misconfiguration, non-2xx status, invalid JSON, anything else
    """
    try:
        base_url = get_catalog_url()
    except (RuntimeError, ValueError) as e:
        raise TransportError(f"Configuration error: {e}") from e

    url = f"{base_url}{path}"

    headers = {"Accept": "application/json"}
    if json is not None:
        headers["Content-Type"] = "application/json"
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"

    try:
        if method == "GET":
            resp = requests.get(url, headers=headers, params=params, timeout=timeout)
        elif method == "POST":
            resp = requests.post(url, json=json, headers=headers, params=params, timeout=timeout)
        else:
            raise ValueError(f"Unsupported HTTP method: {method}")
    except requests.exceptions.Timeout as e:
        log_line("API", f"Timeout on {method} {path}")
        raise BackendTimeoutError(f"Request timed out after {timeout}s") from e
    except requests.exceptions.ConnectionError as e:
        log_line("API", f"Connection error on {method} {path}")
        raise BackendUnavailableError(f"Cannot connect to backend at {base_url}") from e
    except requests.exceptions.RequestException as e:
        error_msg = _sanitize(str(e))
        log_line("API", f"Unexpected error on {method} {path}: {error_msg}")
        raise TransportError(error_msg) from e

    if resp.status_code >= 400:
        log_line("API", f"HTTP {resp.status_code} on {method} {path}")
        raise TransportError(f"HTTP {resp.status_code} on {path}", status_code=resp.status_code)

    try:
        return resp.json()
    except ValueError as e:
        raise TransportError(f"Invalid JSON from {path}", status_code=resp.status_code) from e


def _as_list(body: Any, key: str) -> List[Any]:
    """Accept either a bare JSON list or {key: [...]}."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and isinstance(body.get(key), list):
        return body[key]
    if not body:
        return []
    raise TransportError(f"Unexpected response shape (expected list or '{key}')")


class WatchService:
    """
    Async facade over the catalog endpoints used by the search page.

    Endpoints:
    - GET  /watches/autocomplete?q=<partial>   -> [str]
    - POST /watches/search                      -> [record]
    - GET  /watches/reference/<reference>       -> [record]
    - GET  /tiers                               -> [tier]
    """

    def __init__(self, timeout: int = REQUEST_TIMEOUT_SECONDS, auth_token: Optional[str] = None) -> None:
        self.timeout = timeout
        self.auth_token = auth_token

    async def _call(self, method: Literal["GET", "POST"], path: str, **kwargs: Any) -> Any:
        return await asyncio.to_thread(
            api_request, method, path, timeout=self.timeout, auth_token=self.auth_token, **kwargs
        )

    async def autocomplete(self, partial: str) -> List[str]:
        body = await self._call("GET", "/watches/autocomplete", params={"q": partial})
        return [str(s) for s in _as_list(body, "suggestions")]

    async def search_watches(self, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        body = await self._call("POST", "/watches/search", json=payload)
        return _as_list(body, "results")

    async def get_watch_by_reference(self, reference: str) -> List[Dict[str, Any]]:
        body = await self._call("GET", f"/watches/reference/{quote(reference, safe='')}")
        # A single record is a valid answer for an exact match
        if isinstance(body, dict) and body and "results" not in body:
            return [body]
        return _as_list(body, "results")

    async def fetch_tiers(self) -> List[Dict[str, Any]]:
        body = await self._call("GET", "/tiers")
        return _as_list(body, "tiers")
