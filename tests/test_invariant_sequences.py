"""Random operation sequences from an empty server must never break the table invariant."""

import random
import pytest
from keydir_core.errors import FingerprintCollision
from keydir_core.invariants import holds
from keydir_core.models import Identity, Key
from keydir_core.notify import LocalNotifier
from keydir_core.server import DirectoryServer

EMAILS = [Identity(f"u{i}@example.org") for i in range(6)]


def _random_key(rng):
    n = rng.randint(0, 3)
    fpr = f"F{rng.randint(0, 4)}"
    return Key(key_id=f"K{rng.randint(0, 2)}", fingerprint=fpr, identities=rng.sample(EMAILS, n))


@pytest.mark.parametrize("seed", range(10))
def test_invariant_holds_after_every_operation(seed):
    rng = random.Random(seed)
    notifier = LocalNotifier()
    server = DirectoryServer(notifier=notifier, check_invariants=True)
    tokens = ["bogus"]

    for _ in range(300):
        op = rng.choice(["upload", "request_verify", "verify", "request_manage", "revoke", "by_email"])
        ids = rng.sample(EMAILS, rng.randint(0, 2))

        if op == "upload":
            try:
                tokens.append(server.upload(_random_key(rng)))
            except FingerprintCollision:
                pass
        elif op == "request_verify":
            tokens.extend(server.request_verify(rng.choice(tokens), ids))
        elif op == "verify":
            server.verify(rng.choice(tokens))
        elif op == "request_manage":
            token = server.request_manage(rng.choice(EMAILS))
            if token:
                tokens.append(token)
        elif op == "revoke":
            server.revoke(rng.choice(tokens), ids)
        else:
            key = server.by_email(rng.choice(EMAILS))
            if key is not None:
                full = server.by_fingerprint(key.fingerprint)
                assert set(key.identities) <= set(full.identities)
                assert all(server.by_email(i).fingerprint == key.fingerprint for i in key.identities)

        assert holds(server.snapshot())
