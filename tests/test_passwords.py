"""Unit tests for auth/passwords.py -- PasswordHasher.

Covers:
- hash/verify round trip and rejection of a different plaintext
- salting: two hashes of the same input differ and both verify
- configured cost factor is embedded in the hash
- long and NUL-bearing passwords are accepted without truncation
- malformed or empty stored hashes verify False instead of raising
- HashingError on an impossible cost factor
"""

import bcrypt
import pytest

from auth.errors import HashingError
from auth.passwords import PasswordHasher


class TestHashAndVerify:
    def test_verify_accepts_original_plaintext(self, hasher: PasswordHasher) -> None:
        stored = hasher.hash("Secr3t!23")
        assert hasher.verify("Secr3t!23", stored) is True

    def test_verify_rejects_other_plaintext(self, hasher: PasswordHasher) -> None:
        stored = hasher.hash("Secr3t!23")
        assert hasher.verify("Secr3t!24", stored) is False
        assert hasher.verify("secr3t!23", stored) is False

    def test_hash_is_salted(self, hasher: PasswordHasher) -> None:
        first = hasher.hash("same-input")
        second = hasher.hash("same-input")
        assert first != second
        assert hasher.verify("same-input", first)
        assert hasher.verify("same-input", second)

    def test_hash_never_contains_plaintext(self, hasher: PasswordHasher) -> None:
        assert "hunter22" not in hasher.hash("hunter22")

    def test_cost_factor_is_encoded_in_hash(self) -> None:
        stored = PasswordHasher(rounds=5).hash("pw")
        assert stored.startswith("$2b$05$")

    def test_empty_plaintext_round_trips(self, hasher: PasswordHasher) -> None:
        assert hasher.verify("", hasher.hash("")) is True


class TestArbitraryPlaintext:
    def test_long_passwords_are_not_truncated(self, hasher: PasswordHasher) -> None:
        """bcrypt alone ignores bytes past 72; the pre-hash keeps them significant."""
        base = "x" * 100
        stored = hasher.hash(base + "a")
        assert hasher.verify(base + "a", stored) is True
        assert hasher.verify(base + "b", stored) is False

    def test_nul_and_unicode_are_accepted(self, hasher: PasswordHasher) -> None:
        secret = "pa\x00ss-üñîçødé-\U0001f511"
        assert hasher.verify(secret, hasher.hash(secret)) is True


class TestMalformedHash:
    @pytest.mark.parametrize("stored", ["", "not-a-hash", "$2b$10$short", "ééé"])
    def test_malformed_hash_verifies_false(self, hasher: PasswordHasher, stored: str) -> None:
        assert hasher.verify("anything", stored) is False

    def test_plain_bcrypt_hash_of_raw_password_does_not_match(self, hasher: PasswordHasher) -> None:
        """Hashes are over the pre-hashed secret, so a raw-bcrypt hash is foreign."""
        raw = bcrypt.hashpw(b"password1", bcrypt.gensalt(rounds=4)).decode()
        assert hasher.verify("password1", raw) is False


class TestHashingFailure:
    def test_invalid_cost_factor_raises_hashing_error(self) -> None:
        with pytest.raises(HashingError):
            PasswordHasher(rounds=2)

    def test_dummy_hash_is_a_valid_hash(self, hasher: PasswordHasher) -> None:
        assert hasher.dummy_hash.startswith("$2b$04$")
        assert hasher.verify("wrong", hasher.dummy_hash) is False
