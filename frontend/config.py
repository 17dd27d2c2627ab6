# frontend/config.py
# Settings for the watch search client, read once from the environment

import os
from typing import Literal, Optional, Tuple

Environment = Literal["local", "staging", "production"]

_raw_env = os.environ.get("ENV", "production").lower()
ENV: Environment = _raw_env if _raw_env in ("local", "staging", "production") else "production"  # type: ignore

# Checked in order; the first non-empty one is the watch catalog service
CATALOG_URL_VARS: Tuple[str, ...] = ("CATALOG_API_URL", "BACKEND_URL")
LOCAL_CATALOG_URL = "http://127.0.0.1:8000"


def validate_catalog_url(url: str, env: str) -> None:
    """
    Reject catalog URLs that are unsafe for the environment.

    Raises:
        ValueError: empty URL, plain HTTP or localhost outside local
    """
    if not url:
        raise ValueError("Catalog URL cannot be empty")

    if env != "local":
        if not url.startswith("https://"):
            raise ValueError(f"Catalog URL must use HTTPS in {env}. Got: {url}")
        if "127.0.0.1" in url or "localhost" in url:
            raise ValueError(f"Catalog URL cannot point at localhost in {env}. Got: {url}")


def get_catalog_url(env: Optional[str] = None) -> str:
    """
    Base URL of the watch catalog service, without a trailing slash.

    CATALOG_API_URL wins over BACKEND_URL; with neither set only the local
    environment falls back to LOCAL_CATALOG_URL.

    Raises:
        ValueError: configured URL fails validate_catalog_url
        RuntimeError: nothing configured outside local
    """
    env = env or ENV
    for name in CATALOG_URL_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            url = value.rstrip("/")
            validate_catalog_url(url, env)
            return url

    if env == "local":
        return LOCAL_CATALOG_URL

    raise RuntimeError(
        f"Watch catalog URL not configured for {env}. "
        f"Set one of {', '.join(CATALOG_URL_VARS)} (HTTPS, not localhost)."
    )


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        print(f"[CONFIG] Ignoring invalid {name}={raw!r}, using {default}")
        return default


# Passed to requests; the search core has no timeout layer of its own
REQUEST_TIMEOUT_SECONDS = _int_env("REQUEST_TIMEOUT_SECONDS", 20)

# Autocomplete only fires once the reference has this many characters
AUTOCOMPLETE_MIN_CHARS = _int_env("AUTOCOMPLETE_MIN_CHARS", 3)

# Pause between assigning replayed results and revealing them (0 disables)
REPLAY_REVEAL_DELAY_MS = max(0, _int_env("REPLAY_REVEAL_DELAY_MS", 100))
REPLAY_REVEAL_DELAY_SECONDS = REPLAY_REVEAL_DELAY_MS / 1000.0

ENABLE_VERBOSE_LOGGING = ENV in ("local", "staging")

if ENABLE_VERBOSE_LOGGING:
    print(f"[CONFIG] Environment: {ENV}")
    print(f"[CONFIG] Replay reveal delay: {REPLAY_REVEAL_DELAY_MS} ms")
