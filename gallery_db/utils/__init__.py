"""
Field-level helpers used by the repositories.
"""

from .ids import IdentifierCodec, decode, encode
from .passwords import (
    BcryptHasher,
    CredentialHasher,
    Sha256Hasher,
    hash_password,
    verify_password,
)
from .text import TextNormalizer, extract_tags, normalize

__all__ = [
    "IdentifierCodec",
    "encode",
    "decode",
    "TextNormalizer",
    "extract_tags",
    "normalize",
    "CredentialHasher",
    "Sha256Hasher",
    "BcryptHasher",
    "hash_password",
    "verify_password",
]
