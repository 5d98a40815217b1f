"""
keydir_core.server
------------------
The directory server: an in-memory registry of public keys whose email
identities only become discoverable after an emailed token round-trip.

Flow:
    upload(key)                    -> upload token
    request_verify(upload_token, ids)  one pending token + notification per id
    verify(pending_token)          -> identity confirmed for the key
    by_email(identity)             -> key restricted to its confirmed ids
    request_manage(identity)       -> management token by notification
    revoke(manage_token, ids)      -> confirmations dropped

All five tables are guarded by one lock. Notifications go out after the
lock is released, once their tokens are already recorded.
"""

from __future__ import annotations
import threading
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, List, Optional, Tuple
from .config import ServerConfig, load_config
from .errors import FingerprintCollision, InvariantViolation
from .invariants import check_invariant
from .logger import get_logger, set_level
from .models import MANAGE, VERIFY, Fingerprint, Identity, Key, KeyId, Notification, Token
from .notify import BaseNotifier, LocalNotifier, NotifierError, notifier_factory
from .state import DirectoryState
from .utils import new_token, short

log = get_logger("KeyDir.Server")

Outgoing = List[Tuple[Identity, Notification]]


class DirectoryServer:

    def __init__(
        self,
        notifier: Optional[BaseNotifier] = None,
        id_generator: Optional[Callable[[], Token]] = None,
        check_invariants: bool = False,
    ):
        self.notifier = notifier if notifier is not None else LocalNotifier()
        self.check_invariants = check_invariants
        self._new_id = id_generator or new_token
        self._state = DirectoryState()
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: dict | ServerConfig | None = None, **kwargs) -> "DirectoryServer":
        cfg = config if isinstance(config, ServerConfig) else load_config(config)
        set_level(cfg.log_level)
        notifier = notifier_factory(
            cfg.notifier,
            webhook_url=cfg.webhook_url,
            timeout=cfg.webhook_timeout,
            outbox_limit=cfg.outbox_limit,
        )
        return cls(notifier=notifier, check_invariants=cfg.check_invariants, **kwargs)

    # ------------------------------------------------------------------
    # Internal plumbing
    # ------------------------------------------------------------------
    @contextmanager
    def _transaction(self) -> Iterator[DirectoryState]:
        with self._lock:
            if self.check_invariants:
                check_invariant(self._state)
            yield self._state
            if self.check_invariants:
                check_invariant(self._state)

    def _fresh_tokens(self, state: DirectoryState, count: int) -> List[Token]:
        """Draw count tokens and reject any repeat before a table is touched."""
        tokens = [self._new_id() for _ in range(count)]
        for i, token in enumerate(tokens):
            if token in tokens[:i] or token in state.uploaded or token in state.pending or token in state.managed:
                raise InvariantViolation("token-reuse", f"generator repeated {short(token)}")
        return tokens

    def _fresh_token(self, state: DirectoryState) -> Token:
        return self._fresh_tokens(state, 1)[0]

    def _dispatch(self, outgoing: Outgoing) -> None:
        for identity, notification in outgoing:
            try:
                self.notifier.notify(identity, notification)
            except NotifierError as e:
                # the token stays recorded; the owner can ask again
                log.error(f"[NOTIFY FAILED] {notification.kind} -> {identity.email}: {e}")
            except Exception as e:
                # keep going for the remaining identities
                log.exception(f"[NOTIFY FAILED] {notification.kind} -> {identity.email}: {e}")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def by_fingerprint(self, fingerprint: Fingerprint) -> Optional[Key]:
        with self._lock:
            return self._state.keys.get(fingerprint)

    def by_key_id(self, key_id: KeyId) -> List[Key]:
        """All keys carrying this key id. Key ids are not assumed to be unique."""
        with self._lock:
            return [key for key in self._state.keys.values() if key.key_id == key_id]

    def confirmed_identities_of(self, fingerprint: Fingerprint) -> List[Identity]:
        """Identities listed on the key that are currently confirmed for it, in key order."""
        with self._lock:
            key = self._state.keys.get(fingerprint)
            if key is None:
                return []
            confirmed = set(self._state.confirmed_for(fingerprint))
            return [i for i in dict.fromkeys(key.identities) if i in confirmed]

    def by_email(self, identity: Identity) -> Optional[Key]:
        """
        Look up the key an identity has been confirmed for.

        The returned copy lists only identities that completed the email
        round-trip for that key, never the full identity list.
        """
        with self._lock:
            fingerprint = self._state.confirmed.get(identity)
            if fingerprint is None:
                return None
            key = self._state.keys.get(fingerprint)
            if key is None:
                raise InvariantViolation("C", f"{identity.email} confirmed for unknown key {fingerprint}")
            return key.restricted_to(self.confirmed_identities_of(fingerprint))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def upload(self, key: Key) -> Token:
        """
        Store a key and return an upload token for request_verify().

        Re-uploading an identical key is idempotent for the keys table but
        still issues a new token. A different key under a known fingerprint
        raises FingerprintCollision and changes nothing.
        """
        with self._transaction() as state:
            fingerprint = key.fingerprint
            existing = state.keys.get(fingerprint)
            if existing is not None and existing != key:
                log.warning(f"[UPLOAD] rejected fingerprint collision on {fingerprint}")
                raise FingerprintCollision(fingerprint, existing, key)

            token = self._fresh_token(state)
            state.keys[fingerprint] = key
            state.uploaded[token] = fingerprint

        log.info(f"[UPLOAD] {fingerprint} ({len(key.identities)} identities) token={short(token)}")
        return token

    def request_verify(self, from_token: Token, identities: Iterable[Identity]) -> List[Token]:
        """
        Issue one verification token per identity and notify each of them.

        Nothing happens for an unknown upload token, or when any identity is
        not listed on the key. Returns the issued tokens.
        """
        identities = list(dict.fromkeys(identities))
        outgoing: Outgoing = []

        with self._transaction() as state:
            fingerprint = state.uploaded.get(from_token)
            if fingerprint is None:
                log.debug(f"[REQUEST VERIFY] unknown upload token {short(from_token)}")
                return []

            key = state.keys[fingerprint]
            if not key.covers(identities):
                log.info(f"[REQUEST VERIFY] identities not on key {fingerprint}; ignored")
                return []

            tokens = self._fresh_tokens(state, len(identities))
            for token, identity in zip(tokens, identities):
                state.pending[token] = (fingerprint, identity)
                outgoing.append((identity, Notification(VERIFY, fingerprint, token)))

        log.info(f"[REQUEST VERIFY] {fingerprint}: {len(outgoing)} pending")
        self._dispatch(outgoing)
        return [n.token for _, n in outgoing]

    def verify(self, token: Token) -> None:
        """Confirm the identity behind a pending token. The upload token stays usable."""
        with self._transaction() as state:
            entry = state.pending.pop(token, None)
            if entry is None:
                log.debug(f"[VERIFY] unknown token {short(token)}")
                return
            fingerprint, identity = entry
            previous = state.confirmed.get(identity)
            state.confirmed[identity] = fingerprint

        if previous is not None and previous != fingerprint:
            log.info(f"[VERIFY] {identity.email} moved {previous} -> {fingerprint}")
        else:
            log.info(f"[VERIFY] {identity.email} confirmed for {fingerprint}")

    def request_manage(self, identity: Identity) -> Optional[Token]:
        """Send a management token to a confirmed identity. Not rate-limited."""
        with self._transaction() as state:
            fingerprint = state.confirmed.get(identity)
            if fingerprint is None:
                log.debug(f"[REQUEST MANAGE] {identity.email} not confirmed")
                return None
            token = self._fresh_token(state)
            state.managed[token] = fingerprint

        log.info(f"[REQUEST MANAGE] {identity.email} for {fingerprint}")
        self._dispatch([(identity, Notification(MANAGE, fingerprint, token))])
        return token

    def revoke(self, token: Token, identities: Iterable[Identity]) -> None:
        """
        Drop confirmations for the given identities.

        Only applies when every identity is listed on the managed key.
        Identities that are not currently confirmed are skipped.
        """
        identities = list(identities)
        with self._transaction() as state:
            fingerprint = state.managed.get(token)
            if fingerprint is None:
                log.debug(f"[REVOKE] unknown management token {short(token)}")
                return
            if not state.keys[fingerprint].covers(identities):
                log.info(f"[REVOKE] identities not on key {fingerprint}; ignored")
                return
            removed = [i for i in identities if state.confirmed.pop(i, None) is not None]

        log.info(f"[REVOKE] {fingerprint}: {len(removed)} confirmations removed")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def check_invariant(self) -> None:
        with self._lock:
            check_invariant(self._state)

    def snapshot(self) -> DirectoryState:
        with self._lock:
            return self._state.snapshot()

    def stats(self) -> dict:
        with self._lock:
            return self._state.counts()
