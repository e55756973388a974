"""
RecipePlanner Backend - Credential Hasher
==========================================

What:  One-way salted hashing and verification of plaintext passwords.
How:   bcrypt with a configurable work factor. The digest is self-describing
       ($2b$<rounds>$<salt><hash>), so verify() needs nothing but the digest.
Who:   AuthService (register, login, profile password change).

Digests are never compared with ==. Two hashes of the same password differ
because each call draws a fresh salt; the only valid check is verify().

bcrypt is CPU-bound. Async callers run these methods through
`starlette.concurrency.run_in_threadpool` so a login doesn't stall the
event loop for every other request.
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes and bcrypt>=5 refuses longer input
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    bcrypt wrapper with a fixed cost factor.

    Args:
        rounds: log2 of the iteration count (4..31). Production runs with 10;
                tests use 4 to keep the suite fast.
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh random salt."""
        return bcrypt.hashpw(
            plaintext.encode("utf-8"),
            bcrypt.gensalt(rounds=self.rounds),
        ).decode("ascii")

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        Constant-time comparison against a bcrypt digest.

        Returns False instead of raising for a malformed digest, a non-string
        argument, or a password bcrypt refuses to process.
        """
        if not isinstance(plaintext, str) or not isinstance(digest, str):
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), digest.encode("ascii"))
        except (ValueError, TypeError, UnicodeEncodeError):
            logger.debug("Password verification against malformed digest")
            return False

    def needs_rehash(self, digest: str) -> bool:
        """True when `digest` was produced with a different cost factor."""
        try:
            # $2b$10$... → "10"
            return int(digest.split("$")[2]) != self.rounds
        except (IndexError, ValueError, AttributeError):
            return True
