"""
Public image identifiers.

Internal identifiers (ObjectIds generated by the store, or UUIDs) are turned
into short, URL-safe base62 tokens and back. Tokens are fixed width per
identifier type, so the token length tells decode() which type to rebuild:

    ObjectId (12 bytes) -> 17 characters
    UUID     (16 bytes) -> 22 characters

Example:
    >>> token = encode(ObjectId("507f1f77bcf86cd799439011"))
    >>> decode(token)
    ObjectId('507f1f77bcf86cd799439011')
"""

import uuid
from typing import Any, Union

from bson import ObjectId

from ..constants import BASE62_ALPHABET, OBJECT_ID_TOKEN_LENGTH, UUID_TOKEN_LENGTH
from ..exceptions import InvalidTokenError

Identifier = Union[ObjectId, uuid.UUID]

_BASE = len(BASE62_ALPHABET)
_INDEX = {char: i for i, char in enumerate(BASE62_ALPHABET)}

# token length -> (byte width, constructor)
_TOKEN_TYPES = {
    OBJECT_ID_TOKEN_LENGTH: (12, ObjectId),
    UUID_TOKEN_LENGTH: (16, lambda raw: uuid.UUID(bytes=raw)),
}


def _coerce(identifier: Any) -> tuple[bytes, int]:
    """Return the identifier's raw bytes and its token width."""
    if isinstance(identifier, ObjectId):
        return identifier.binary, OBJECT_ID_TOKEN_LENGTH
    if isinstance(identifier, uuid.UUID):
        return identifier.bytes, UUID_TOKEN_LENGTH
    if isinstance(identifier, str):
        if len(identifier) == 24 and ObjectId.is_valid(identifier):
            return ObjectId(identifier).binary, OBJECT_ID_TOKEN_LENGTH
        try:
            return uuid.UUID(identifier).bytes, UUID_TOKEN_LENGTH
        except ValueError:
            pass
    raise InvalidTokenError(
        f"cannot encode identifier of type {type(identifier).__name__}: {identifier!r}",
        token=identifier,
    )


def encode(identifier: Any) -> str:
    """
    Encode an identifier as a public token.

    Args:
        identifier: ObjectId, UUID, or the string form of either

    Returns:
        Fixed-width base62 token

    Raises:
        InvalidTokenError: If the identifier is neither an ObjectId nor a UUID
    """
    raw, width = _coerce(identifier)
    value = int.from_bytes(raw, "big")

    chars = []
    while value:
        value, rem = divmod(value, _BASE)
        chars.append(BASE62_ALPHABET[rem])
    token = "".join(reversed(chars))
    return token.rjust(width, BASE62_ALPHABET[0])


def decode(token: Any) -> Identifier:
    """
    Decode a public token back into the identifier it was built from.

    The result is always the native type (ObjectId or UUID), also for tokens
    encoded from the string form. Records expose ``id`` as a string, so
    compare against ``str(decode(token))`` or ``ObjectId(record.id)``.

    Raises:
        InvalidTokenError: On non-string input, an unknown length, characters
            outside the alphabet, or a value too large for the identifier type
    """
    if not isinstance(token, str):
        raise InvalidTokenError("token must be a string", token=token)

    token_type = _TOKEN_TYPES.get(len(token))
    if token_type is None:
        raise InvalidTokenError(f"invalid token length {len(token)}", token=token)
    width, build = token_type

    value = 0
    for char in token:
        digit = _INDEX.get(char)
        if digit is None:
            raise InvalidTokenError(f"invalid character {char!r} in token", token=token)
        value = value * _BASE + digit

    if value >> (width * 8):
        raise InvalidTokenError("token out of range", token=token)

    return build(value.to_bytes(width, "big"))


class IdentifierCodec:
    """Injectable wrapper around encode()/decode()."""

    @staticmethod
    def encode(identifier: Any) -> str:
        return encode(identifier)

    @staticmethod
    def decode(token: Any) -> Identifier:
        return decode(token)
