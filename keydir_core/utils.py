"""
keydir_core.utils
-----------------
Lightweight helpers for token generation, timestamping and base64 utilities.
Tokens are opaque uuid4 hex strings and are never reused within a process.
"""

from __future__ import annotations
import base64, time, uuid

def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    return base64.b64decode(s.encode("ascii"))

def now_ts() -> str:
    # RFC3339 / ISO 8601 in UTC, second precision
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

def new_token() -> str:
    return uuid.uuid4().hex

def short(token: str) -> str:
    # enough of a token to correlate log lines without leaking it
    return f"{token[:8]}..."
