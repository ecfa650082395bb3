"""
Normalization and hashing of user data.

Each field is formatted into a canonical form, hashed with SHA-256 and
encoded as hex or base64. Region and postal codes are formatted only.
"""

from .digest import Encoding, base64_encode, encode, hash_string, hex_encode
from .normalizers import (
    format_email_address,
    format_family_name,
    format_given_name,
    format_phone_number,
    format_postal_code,
    format_region_code,
)
from .user_data import UserDataFormatter

__all__ = [
    "Encoding",
    "UserDataFormatter",
    "format_email_address",
    "format_phone_number",
    "format_given_name",
    "format_family_name",
    "format_region_code",
    "format_postal_code",
    "hash_string",
    "hex_encode",
    "base64_encode",
    "encode",
]
