import pytest
from keydir_core.errors import InvariantViolation
from keydir_core.invariants import (
    check_invariant, holds, inv_confirmed, inv_keys, inv_managed, inv_pending, inv_uploaded,
)
from keydir_core.models import Identity, Key
from keydir_core.state import DirectoryState

A, B = Identity("a@x"), Identity("b@x")
KEY = Key("K1", "F1", [A])


def test_empty_state_holds():
    assert holds(DirectoryState())


def test_keys_must_be_stored_under_own_fingerprint():
    assert inv_keys({"F1": KEY})
    assert not inv_keys({"F2": KEY})


def test_token_tables_must_reference_known_keys():
    keys = {"F1": KEY}
    assert inv_uploaded(keys, {"T1": "F1"})
    assert not inv_uploaded(keys, {"T1": "F9"})
    assert inv_managed(keys, {"T1": "F1"})
    assert not inv_managed(keys, {"T1": "F9"})


def test_pending_and_confirmed_need_identity_on_key():
    keys = {"F1": KEY}
    assert inv_pending(keys, {"T1": ("F1", A)})
    assert not inv_pending(keys, {"T1": ("F1", B)})
    assert not inv_pending(keys, {"T1": ("F9", A)})
    assert inv_confirmed(keys, {A: "F1"})
    assert not inv_confirmed(keys, {B: "F1"})


@pytest.mark.parametrize("table,entry,name", [
    ("uploaded", ("T1", "F9"), "U"),
    ("pending", ("T1", ("F1", B)), "P"),
    ("confirmed", (B, "F1"), "C"),
    ("managed", ("T1", "F9"), "M"),
])
def test_check_invariant_names_failing_table(table, entry, name):
    state = DirectoryState(keys={"F1": KEY})
    k, v = entry
    getattr(state, table)[k] = v

    with pytest.raises(InvariantViolation) as exc:
        check_invariant(state)
    assert exc.value.invariant == name
    assert not holds(state)
