"""SHA-256 digest and byte-to-text encoding."""

import base64
import hashlib
from enum import Enum
from typing import Optional, Union

from ..errors import InvalidInputError

BytesLike = Union[bytes, bytearray, memoryview]


class Encoding(str, Enum):
    """Text encoding applied to digest bytes."""

    HEX = "hex"
    BASE64 = "base64"

    @classmethod
    def parse(cls, value: Union["Encoding", str, None]) -> "Encoding":
        """Resolve an ``Encoding`` from a member or its case-insensitive value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key == member.value:
                    return member
        raise InvalidInputError(f"Invalid encoding: {value!r}")


def hash_string(text: Optional[str]) -> bytes:
    """
    Return the SHA-256 digest of ``text`` encoded as UTF-8.

    The string is hashed as given, without trimming.

    Raises:
        InvalidInputError: If ``text`` is None, not a string, or blank.
    """
    if text is None:
        raise InvalidInputError("String is null.")
    if not isinstance(text, str):
        raise InvalidInputError(
            f"Expected a string to hash, got {type(text).__name__}."
        )
    if not text.strip():
        raise InvalidInputError("String is empty or blank.")
    return hashlib.sha256(text.encode("utf-8")).digest()


def _require_bytes(data: Optional[BytesLike]) -> bytes:
    if data is None:
        raise InvalidInputError("Byte array is null.")
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidInputError(
            f"Expected bytes to encode, got {type(data).__name__}."
        )
    data = bytes(data)
    if not data:
        raise InvalidInputError("Byte array is empty.")
    return data


def hex_encode(data: Optional[BytesLike]) -> str:
    """Lowercase hex, two characters per byte, no separators."""
    return _require_bytes(data).hex()


def base64_encode(data: Optional[BytesLike]) -> str:
    """Standard (RFC 4648) base64 with ``=`` padding."""
    return base64.b64encode(_require_bytes(data)).decode("ascii")


def encode(data: Optional[BytesLike], encoding: Union[Encoding, str]) -> str:
    """Encode ``data`` with the given encoding."""
    encoding = Encoding.parse(encoding)
    if encoding is Encoding.HEX:
        return hex_encode(data)
    return base64_encode(data)
