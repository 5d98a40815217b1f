from __future__ import annotations
from typing import Any


class KeyDirError(Exception):
    pass


class FingerprintCollision(KeyDirError):
    """An upload reused a known fingerprint for a key with different content."""

    def __init__(self, fingerprint: str, existing: Any, incoming: Any):
        super().__init__(f"fingerprint {fingerprint} is already bound to a different key")
        self.fingerprint = fingerprint
        self.existing = existing
        self.incoming = incoming


class InvariantViolation(KeyDirError):
    """Internal-fatal: the directory tables no longer agree with each other."""

    def __init__(self, invariant: str, detail: str = ""):
        super().__init__(f"invariant {invariant} violated" + (f": {detail}" if detail else ""))
        self.invariant = invariant
        self.detail = detail


class ConfigError(KeyDirError, ValueError):
    pass
