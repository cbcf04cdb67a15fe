"""
tests.test_signing

Signature verifier and shared-secret comparison.
"""

from __future__ import annotations

import pytest

from edge_gate.auth.signing import secrets_match, sign_username, verify_signature


@pytest.mark.parametrize("username", ["alice", "Bob", "用户", "a b;c=d"])
def test_signature_verifies_with_signing_secret(username: str) -> None:
    sig = sign_username(username, "s3cret")
    assert verify_signature(username, sig, "s3cret")


def test_signature_rejected_under_other_secret() -> None:
    sig = sign_username("alice", "s3cret")
    assert not verify_signature("alice", sig, "other")


def test_signature_bound_to_username() -> None:
    sig = sign_username("alice", "s3cret")
    assert not verify_signature("mallory", sig, "s3cret")


def test_known_vector() -> None:
    # HMAC-SHA256(key="key", msg="The quick brown fox jumps over the lazy dog")
    assert (
        sign_username("The quick brown fox jumps over the lazy dog", "key")
        == "f7bc83f430538424b13298e6aa6fb143ef4d59a14946175997479dbc2d1a3cd8"
    )


@pytest.mark.parametrize("bad", ["", "zz", "abc", "not-hex-at-all", "0" * 63, "g" * 64])
def test_malformed_hex_is_false_not_error(bad: str) -> None:
    assert verify_signature("alice", bad, "s3cret") is False


def test_one_flipped_hex_digit_fails() -> None:
    sig = sign_username("alice", "s3cret")
    flipped = ("1" if sig[0] != "1" else "2") + sig[1:]
    assert not verify_signature("alice", flipped, "s3cret")


def test_uppercase_hex_accepted() -> None:
    sig = sign_username("alice", "s3cret")
    assert verify_signature("alice", sig.upper(), "s3cret")


def test_secrets_match() -> None:
    assert secrets_match("correct", "correct")
    assert not secrets_match("Correct", "correct")
    assert not secrets_match("", "correct")


def test_lone_surrogates_are_false_not_error() -> None:
    assert verify_signature("\ud800", "00" * 32, "s3cret") is False
    assert verify_signature("alice", sign_username("alice", "s3cret"), "\udfff") is False
    assert secrets_match("\ud800", "s3cret") is False
    assert secrets_match("s3cret", "\ud800") is False
