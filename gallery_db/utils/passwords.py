"""
Password digests.

Two schemes are supported:

- ``sha256``: unsalted hex SHA-256. Deterministic, so the same password always
  produces the same digest. This is the default and matches digests already
  stored by earlier deployments.
- ``bcrypt``: salted bcrypt, opt-in through ``GalleryConfig.password_scheme``.

CredentialHasher.verify() recognizes bcrypt digests by their prefix, so
switching schemes does not invalidate stored passwords.
"""

import hashlib
import hmac
import logging

import bcrypt

from ..constants import (
    BCRYPT_PREFIX,
    DEFAULT_PASSWORD_SCHEME,
    PASSWORD_SCHEME_BCRYPT,
    PASSWORD_SCHEME_SHA256,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Sha256Hasher:
    """Unsalted SHA-256 hex digest."""

    scheme = PASSWORD_SCHEME_SHA256

    def hash(self, plaintext: str) -> str:
        return hashlib.sha256(plaintext.encode("utf-8")).hexdigest()

    def verify(self, plaintext: str, digest: str) -> bool:
        return hmac.compare_digest(self.hash(plaintext).encode("utf-8"), digest.encode("utf-8"))


class BcryptHasher:
    """Salted bcrypt digest."""

    scheme = PASSWORD_SCHEME_BCRYPT

    def hash(self, plaintext: str) -> str:
        return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), digest.encode("utf-8"))
        except ValueError:
            # Malformed salt in the stored digest
            logger.warning("Stored bcrypt digest is malformed - password verification rejected")
            return False


_HASHERS = {
    PASSWORD_SCHEME_SHA256: Sha256Hasher,
    PASSWORD_SCHEME_BCRYPT: BcryptHasher,
}


class CredentialHasher:
    """
    Hashes new passwords with the configured scheme and verifies digests of
    either scheme.

    Example:
        hasher = CredentialHasher()
        digest = hasher.hash("s3cret")
        hasher.verify("s3cret", digest)  # True
    """

    def __init__(self, scheme: str = DEFAULT_PASSWORD_SCHEME) -> None:
        hasher_class = _HASHERS.get(scheme)
        if hasher_class is None:
            raise ConfigurationError(
                f"Unknown password scheme {scheme!r}",
                config_key="password_scheme",
                config_value=scheme,
            )
        self._hasher = hasher_class()

    @property
    def scheme(self) -> str:
        return self._hasher.scheme

    def hash(self, plaintext: str) -> str:
        """Return the digest to store for a plaintext password."""
        return self._hasher.hash(plaintext)

    def verify(self, plaintext: str, digest: str | None) -> bool:
        """Return True iff the plaintext matches the stored digest."""
        if not digest:
            return False
        if digest.startswith(BCRYPT_PREFIX):
            return BcryptHasher().verify(plaintext, digest)
        return Sha256Hasher().verify(plaintext, digest)


_default_hasher = Sha256Hasher()


def hash_password(plaintext: str) -> str:
    """SHA-256 digest of a password."""
    return _default_hasher.hash(plaintext)


def verify_password(plaintext: str, digest: str) -> bool:
    return _default_hasher.verify(plaintext, digest)
