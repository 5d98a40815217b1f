"""
KeyDir Core Package
===================
An in-memory PGP key directory with email-verified identity lookup.

Provides:
- Key / Identity value types and the five-table directory state
- DirectoryServer: upload, verification, management and lookup operations
- Pluggable notifiers (local outbox, HTTP webhook)
"""

from .errors import ConfigError, FingerprintCollision, InvariantViolation, KeyDirError
from .models import Identity, Key, Notification
from .server import DirectoryServer

__all__ = [
    "DirectoryServer",
    "Identity",
    "Key",
    "Notification",
    "KeyDirError",
    "FingerprintCollision",
    "InvariantViolation",
    "ConfigError",
]
