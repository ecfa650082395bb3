"""
UserDataFormatter: the normalize -> hash -> encode pipeline.

This is the primary public API for piiprep.
"""

from typing import Optional, Union

from ..config import get_default_encoding
from .digest import BytesLike, Encoding, base64_encode, encode, hash_string, hex_encode
from .normalizers import (
    format_email_address,
    format_family_name,
    format_given_name,
    format_phone_number,
    format_postal_code,
    format_region_code,
)


class UserDataFormatter:
    """
    Normalizes and hashes user data before it is sent for ingestion.

    Features:
    - Per-field normalization (email, phone, given/family name, region, postal code)
    - SHA-256 hashing of identifier fields
    - Hex or base64 output, chosen once per formatter or per call

    Usage:
        formatter = UserDataFormatter(encoding=Encoding.HEX)
        formatter.process_email_address("  ALEXZ@example.com ")
        # '509e933019bb285a134a9334b8bb679dff79d0ce023d529af4bd744d47b4fd8a'

    The formatter holds no mutable state and can be shared between threads.
    """

    def __init__(self, encoding: Union[Encoding, str, None] = None):
        """
        Initialize the formatter.

        Args:
            encoding: Default encoding for ``process_*`` calls. Falls back to
                the PIIPREP_ENCODING environment variable, then hex.
        """
        self.encoding = Encoding.parse(
            encoding if encoding is not None else get_default_encoding()
        )

    format_email_address = staticmethod(format_email_address)
    format_phone_number = staticmethod(format_phone_number)
    format_given_name = staticmethod(format_given_name)
    format_family_name = staticmethod(format_family_name)
    format_region_code = staticmethod(format_region_code)
    format_postal_code = staticmethod(format_postal_code)

    hash_string = staticmethod(hash_string)
    hex_encode = staticmethod(hex_encode)
    base64_encode = staticmethod(base64_encode)

    def encode(
        self, data: Optional[BytesLike], encoding: Union[Encoding, str, None] = None
    ) -> str:
        return encode(data, self.encoding if encoding is None else encoding)

    def process_email_address(
        self, email_address: Optional[str], encoding: Union[Encoding, str, None] = None
    ) -> str:
        """Normalize, hash and encode an email address."""
        return self._hash_and_encode(format_email_address(email_address), encoding)

    def process_phone_number(
        self, phone_number: Optional[str], encoding: Union[Encoding, str, None] = None
    ) -> str:
        """Normalize, hash and encode a phone number."""
        return self._hash_and_encode(format_phone_number(phone_number), encoding)

    def process_given_name(
        self, given_name: Optional[str], encoding: Union[Encoding, str, None] = None
    ) -> str:
        """Normalize, hash and encode a given name."""
        return self._hash_and_encode(format_given_name(given_name), encoding)

    def process_family_name(
        self, family_name: Optional[str], encoding: Union[Encoding, str, None] = None
    ) -> str:
        """Normalize, hash and encode a family name."""
        return self._hash_and_encode(format_family_name(family_name), encoding)

    def process_region_code(self, region_code: Optional[str]) -> str:
        """Normalize a region code. Region codes are sent unhashed."""
        return format_region_code(region_code)

    def process_postal_code(self, postal_code: Optional[str]) -> str:
        """Normalize a postal code. Postal codes are sent unhashed."""
        return format_postal_code(postal_code)

    def _hash_and_encode(
        self, normalized: str, encoding: Union[Encoding, str, None]
    ) -> str:
        return self.encode(hash_string(normalized), encoding)
