"""
keydir_core.models
------------------
Value types held by the directory tables.

- Identity: an email address attached to a key
- Key: an uploaded public key (immutable; restricted_to() returns a copy)
- Notification: the message handed to the notifier for verify/manage round-trips

Fingerprints, key ids and tokens are opaque strings.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Iterable, Tuple
from .utils import now_ts

Fingerprint = str
KeyId = str
Token = str

VERIFY = "verify"
MANAGE = "manage"
NOTIFICATION_KINDS = (VERIFY, MANAGE)


@dataclass(frozen=True)
class Identity:
    email: str

    def __str__(self) -> str:
        return self.email


@dataclass(frozen=True)
class Key:
    key_id: KeyId
    fingerprint: Fingerprint
    identities: Tuple[Identity, ...] = ()

    def __post_init__(self):
        # accept any iterable but always store an immutable tuple
        object.__setattr__(self, "identities", tuple(self.identities))

    def has_identity(self, identity: Identity) -> bool:
        return identity in self.identities

    def covers(self, identities: Iterable[Identity]) -> bool:
        """True when every given identity is listed on this key (set semantics)."""
        return set(identities) <= set(self.identities)

    def restricted_to(self, identities: Iterable[Identity]) -> "Key":
        ids = tuple(identities)
        assert self.covers(ids), "restricted_to() needs a subset of the key's identities"
        return Key(key_id=self.key_id, fingerprint=self.fingerprint, identities=ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key_id": self.key_id,
            "fingerprint": self.fingerprint,
            "identities": [i.email for i in self.identities],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Key":
        return cls(
            key_id=data["key_id"],
            fingerprint=data["fingerprint"],
            identities=[Identity(e) for e in data.get("identities", [])],
        )


@dataclass
class Notification:
    kind: str
    fingerprint: Fingerprint
    token: Token
    ts: str = field(default_factory=now_ts)

    def __post_init__(self):
        if self.kind not in NOTIFICATION_KINDS:
            raise ValueError(f"unknown notification kind: {self.kind}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Notification":
        return cls(
            kind=data["kind"],
            fingerprint=data["fingerprint"],
            token=data["token"],
            ts=data.get("ts") or now_ts(),
        )
