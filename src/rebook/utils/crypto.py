"""Passcode hashing helpers (bcrypt)."""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 10


def hash_passcode(passcode: str, *, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a salted bcrypt hash of *passcode* as an ASCII string."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(passcode.encode("utf-8"), salt).decode("ascii")


def verify_passcode(passcode: str, passcode_hash: str) -> bool:
    """Check *passcode* against a stored bcrypt hash.

    Malformed hashes compare as a mismatch rather than raising.
    """
    try:
        return bcrypt.checkpw(passcode.encode("utf-8"), passcode_hash.encode("ascii"))
    except ValueError:
        return False
