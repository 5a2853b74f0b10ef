"""
Per-waitlist origin allow-lists for the public signup API.

A pattern is one of

* ``*.example.com``: the apex ``example.com`` or any subdomain of it
* ``https://app.example.com``: exactly that origin (scheme, host and port)
* ``example.com``: exactly that host, any scheme

An empty list admits every origin.
"""

from typing import Iterable, Optional
from urllib.parse import urlsplit

ALLOWED_METHODS = "POST, GET, OPTIONS"
ALLOWED_HEADERS = "Content-Type"
PREFLIGHT_MAX_AGE = "86400"
DEFAULT_PORTS = {"http": 80, "https": 443}


def parse_origin(value: str) -> Optional[tuple]:
    """Returns `(origin, host)` for a serialized origin, or None if unparseable."""
    try:
        parts = urlsplit(value.strip())
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        return None
    if not parts.scheme or not hostname:
        return None
    scheme = parts.scheme.lower()
    if port and DEFAULT_PORTS.get(scheme) != port:
        host = f"{hostname}:{port}"
    else:
        host = hostname
    return f"{scheme}://{host}", host

def is_origin_allowed(origin: str, allowed_origins: Optional[Iterable[str]]) -> bool:
    patterns = list(allowed_origins or [])
    if not patterns:
        return True

    parsed = parse_origin(origin)
    if parsed is None:
        return False
    origin, host = parsed

    for raw in patterns:
        pattern = raw.strip().lower()
        if not pattern:
            continue
        if pattern.startswith("*."):
            domain = pattern[2:]
            if host == domain or host.endswith("." + domain):
                return True
        elif "://" in pattern:
            allowed = parse_origin(pattern)
            if allowed is not None and allowed[0] == origin:
                return True
        elif host == pattern:
            return True
    return False

def cors_headers(origin: str, preflight: bool = False) -> dict:
    """Headers echoing the caller's origin, never a wildcard."""
    headers = {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Vary": "Origin",
    }
    if preflight:
        headers["Access-Control-Allow-Headers"] = ALLOWED_HEADERS
        headers["Access-Control-Max-Age"] = PREFLIGHT_MAX_AGE
    return headers
