import itertools
import pytest
from keydir_core.models import Identity, Key
from keydir_core.notify import LocalNotifier
from keydir_core.server import DirectoryServer


@pytest.fixture
def notifier():
    return LocalNotifier()


@pytest.fixture
def ids():
    """Deterministic token generator: T1, T2, ..."""
    counter = itertools.count(1)
    return lambda: f"T{next(counter)}"


@pytest.fixture
def server(notifier, ids):
    return DirectoryServer(notifier=notifier, id_generator=ids, check_invariants=True)


@pytest.fixture
def k1():
    return Key(key_id="K1", fingerprint="F1", identities=[Identity("a@x"), Identity("b@x")])
