"""
piiprep - Normalize and hash user data before ingestion

Formats emails, phone numbers, names, region and postal codes, hashes the
identifiers with SHA-256 and encodes them as hex or base64, so raw PII never
leaves the caller's environment.
"""

__version__ = "0.1.0"

import sys

if sys.version_info < (3, 10):
    raise RuntimeError("piiprep requires Python 3.10 or higher")

from .errors import IngestFileError, InvalidInputError
from .formatter import (
    Encoding,
    UserDataFormatter,
    base64_encode,
    format_email_address,
    format_family_name,
    format_given_name,
    format_phone_number,
    format_postal_code,
    format_region_code,
    hash_string,
    hex_encode,
)

__all__ = [
    "__version__",
    # Main API
    "UserDataFormatter",
    "Encoding",
    # Errors
    "InvalidInputError",
    "IngestFileError",
    # Normalizers
    "format_email_address",
    "format_phone_number",
    "format_given_name",
    "format_family_name",
    "format_region_code",
    "format_postal_code",
    # Digest and encoding
    "hash_string",
    "hex_encode",
    "base64_encode",
]
