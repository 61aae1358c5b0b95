from __future__ import annotations

import pytest

from videotube.core.security import PasswordHasher, get_hasher
from videotube.services._shared.errors import ErrorKind, InternalError


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(method="pbkdf2:sha256:1000")


def test_hash_never_equals_plaintext_and_verifies(hasher):
    hashed = hasher.hash("p1")
    assert hashed != "p1"
    assert hashed.startswith("pbkdf2:sha256:1000$")
    assert hasher.verify("p1", hashed) is True
    assert hasher.verify("p2", hashed) is False


def test_same_plaintext_hashes_differently_but_both_verify(hasher):
    first, second = hasher.hash("secret"), hasher.hash("secret")
    assert first != second
    assert hasher.verify("secret", first)
    assert hasher.verify("secret", second)


def test_default_method_is_scrypt():
    hashed = PasswordHasher().hash("secret")
    assert hashed.startswith("scrypt:")
    assert PasswordHasher().verify("secret", hashed)


@pytest.mark.parametrize("bad", ["", None, 123])
def test_hash_rejects_empty_or_non_string(hasher, bad):
    with pytest.raises(ValueError):
        hasher.hash(bad)


@pytest.mark.parametrize("stored", ["", None, "not-a-hash"])
def test_verify_fails_closed_on_missing_or_garbage_hash(hasher, stored):
    assert hasher.verify("secret", stored) is False


def test_backend_failure_surfaces_as_internal_error():
    with pytest.raises(InternalError) as excinfo:
        PasswordHasher(method="no-such-method").hash("secret")
    assert excinfo.value.kind is ErrorKind.INTERNAL


def test_app_configures_process_hasher(app):
    assert get_hasher().method == app.config["PASSWORD_HASH_METHOD"]
