"""
keydir_core.crypto
------------------
Key material helpers for the directory:

- Ed25519 keypair generation
- Fingerprint and key-id derivation from a raw public key
- generate_key(): a fresh directory Key bound to a set of identities

The directory itself never inspects key material; these helpers exist so
hosting layers and tests can mint realistic keys.
"""

from __future__ import annotations
from typing import Iterable, Tuple
from cryptography.hazmat.primitives.asymmetric import ed25519
import hashlib
from .models import Identity, Key
from .utils import b64d

FINGERPRINT_HEX_LEN = 40
KEY_ID_HEX_LEN = 16


def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = ed25519.Ed25519PrivateKey.generate()
    pk = sk.public_key()
    return sk.private_bytes_raw(), pk.public_bytes_raw()


def compute_fingerprint(pub_raw: bytes) -> str:
    """
    Stable fingerprint for a raw Ed25519 public key.

    SHA-256 over the raw key bytes, truncated to 40 uppercase hex chars so it
    reads like a v4 OpenPGP fingerprint.
    """
    return hashlib.sha256(pub_raw).hexdigest()[:FINGERPRINT_HEX_LEN].upper()


def compute_pubkey_fingerprint(pubkey_b64: str) -> str:
    return compute_fingerprint(b64d(pubkey_b64))


def key_id_of(fingerprint: str) -> str:
    # long key id: low-order 64 bits of the fingerprint
    return fingerprint[-KEY_ID_HEX_LEN:]


def generate_key(identities: Iterable[Identity | str]) -> Tuple[Key, bytes]:
    """Mint a new keypair and wrap its public half as a directory Key."""
    priv, pub = ed25519_generate()
    fingerprint = compute_fingerprint(pub)
    ids = [i if isinstance(i, Identity) else Identity(i) for i in identities]
    key = Key(key_id=key_id_of(fingerprint), fingerprint=fingerprint, identities=ids)
    return key, priv
