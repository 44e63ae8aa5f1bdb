"""
Tests for password hashing of the legacy user record.
"""
import bcrypt
import pytest

from backend.app.services.auth_service import hash_password


def test_hash_is_not_plaintext():
    hashed = hash_password("s3cret", rounds=4)
    assert hashed != "s3cret"
    assert hashed.startswith("$2")


def test_hash_checks_with_bcrypt():
    hashed = hash_password("s3cret", rounds=4)
    assert bcrypt.checkpw(b"s3cret", hashed.encode("utf-8"))
    assert not bcrypt.checkpw(b"wrong", hashed.encode("utf-8"))


def test_same_password_different_salt():
    assert hash_password("s3cret", rounds=4) != hash_password("s3cret", rounds=4)


def test_long_password_truncated_to_72_bytes():
    hashed = hash_password("x" * 100, rounds=4)
    assert bcrypt.checkpw(b"x" * 72, hashed.encode("utf-8"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
