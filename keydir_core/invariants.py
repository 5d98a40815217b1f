"""
keydir_core.invariants
----------------------
Relational integrity predicates over the five directory tables.

    K  every keys[fpr] has key.fingerprint == fpr
    U  every uploaded token points at a fingerprint in keys
    P  every pending (fpr, identity) points at a key listing that identity
    C  every confirmed identity -> fpr points at a key listing that identity
    M  every managed token points at a fingerprint in keys

The predicates are pure; check_invariant() raises InvariantViolation naming
the first failing one.
"""

from __future__ import annotations
from typing import Dict, Tuple
from .errors import InvariantViolation
from .models import Fingerprint, Identity, Key, Token


def valid_key(fingerprint: Fingerprint, key: Key) -> bool:
    return key.fingerprint == fingerprint


def inv_keys(keys: Dict[Fingerprint, Key]) -> bool:
    return all(valid_key(f, k) for f, k in keys.items())


def inv_uploaded(keys: Dict[Fingerprint, Key], uploaded: Dict[Token, Fingerprint]) -> bool:
    return all(f in keys for f in uploaded.values())


def valid_pending(keys: Dict[Fingerprint, Key], fingerprint: Fingerprint, identity: Identity) -> bool:
    key = keys.get(fingerprint)
    return key is not None and key.has_identity(identity)


def inv_pending(keys: Dict[Fingerprint, Key], pending: Dict[Token, Tuple[Fingerprint, Identity]]) -> bool:
    return all(valid_pending(keys, f, i) for f, i in pending.values())


# same shape as a pending entry
valid_confirmed = valid_pending


def inv_confirmed(keys: Dict[Fingerprint, Key], confirmed: Dict[Identity, Fingerprint]) -> bool:
    return all(valid_confirmed(keys, f, i) for i, f in confirmed.items())


def inv_managed(keys: Dict[Fingerprint, Key], managed: Dict[Token, Fingerprint]) -> bool:
    return all(f in keys for f in managed.values())


def check_invariant(state) -> None:
    checks = (
        ("K", lambda: inv_keys(state.keys)),
        ("U", lambda: inv_uploaded(state.keys, state.uploaded)),
        ("P", lambda: inv_pending(state.keys, state.pending)),
        ("C", lambda: inv_confirmed(state.keys, state.confirmed)),
        ("M", lambda: inv_managed(state.keys, state.managed)),
    )
    for name, ok in checks:
        if not ok():
            raise InvariantViolation(name)


def holds(state) -> bool:
    try:
        check_invariant(state)
    except InvariantViolation:
        return False
    return True
