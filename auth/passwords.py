"""
auth/passwords.py -- Credential hashing (bcrypt, direct usage).

Security design decisions:
  bcrypt is used directly rather than through passlib. The cost factor is
  passed in by the caller (Settings.bcrypt_rounds, default 10) so a deployment
  can raise it without code changes.

  Inputs are pre-hashed: base64(SHA-256(plaintext)) is what bcrypt sees.
  bcrypt only consumes the first 72 bytes of its input and recent releases
  raise ValueError beyond that, so without the pre-hash a long passphrase
  would either be truncated or rejected. The 44-byte base64 digest has no
  NUL bytes and keeps the full entropy of the original secret.

  verify() never raises. A malformed or foreign stored hash is a failed
  verification, not an error.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import base64
import hashlib

import bcrypt

from auth.errors import HashingError

DEFAULT_ROUNDS = 10


def _prehash(plain: str) -> bytes:
    digest = hashlib.sha256(plain.encode("utf-8", "surrogatepass")).digest()
    return base64.b64encode(digest)


class PasswordHasher:
    """Salted, deliberately slow one-way hashing of low-entropy secrets.

    Usage:
        hasher = PasswordHasher(rounds=10)
        stored = hasher.hash("correct horse")
        hasher.verify("correct horse", stored)  # True
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        # Timing equalization dummy hash [C1].
        # Computed once here so the first login against an unknown email is
        # not measurably slower than later ones. AuthService.login() verifies
        # against it whenever the account does not exist.
        self.dummy_hash: str = self.hash("authcore_timing_dummy")

    def hash(self, plain: str) -> str:
        """Return a salted bcrypt hash of ``plain``.

        Raises HashingError only when bcrypt itself fails (bad cost factor,
        no entropy source). Any string is an acceptable password.
        """
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(_prehash(plain), salt).decode("ascii")
        except (ValueError, OSError) as exc:
            raise HashingError() from exc

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if ``plain`` matches ``hashed``. Never raises."""
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(_prehash(plain), hashed.encode("ascii"))
        except (ValueError, TypeError):
            return False
