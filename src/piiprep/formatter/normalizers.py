"""Email, phone, name, region and postal code normalization rules."""

import re
from typing import Optional

from ..config import GMAIL_DOMAINS
from ..errors import InvalidInputError

# Only ASCII 0-9 count as digits; fullwidth and Arabic-Indic digits are dropped
_NON_DIGIT = re.compile(r"[^0-9]")
_WHITESPACE = re.compile(r"\s")

# Leading honorific, only when followed by whitespace or the end of the name
_GIVEN_NAME_PREFIX = re.compile(r"^(?:mr|mrs|ms|dr)\.(?:\s|$)")

_FAMILY_NAME_SUFFIXES = (
    "jr",
    "sr",
    "2nd",
    "3rd",
    "ii",
    "iii",
    "iv",
    "v",
    "vi",
    "cpa",
    "dc",
    "dds",
    "vm",
    "jd",
    "md",
    "phd",
)

# Separator, suffix token, then at most one trailing whitespace character
_FAMILY_NAME_SUFFIX = re.compile(
    r"(?:,\s*|\s+)(?:{})\.?\s?$".format("|".join(_FAMILY_NAME_SUFFIXES))
)

_REGION_CODE = re.compile(r"[A-Z]{2}")


def _require_text(value: Optional[str], label: str, field_name: str) -> str:
    """Return ``value`` stripped, or raise if it is missing or blank."""
    if value is None:
        raise InvalidInputError(f"{label} is null.", field_name)
    if not isinstance(value, str):
        raise InvalidInputError(
            f"{label} must be a string, got {type(value).__name__}.", field_name
        )
    trimmed = value.strip()
    if not trimmed:
        raise InvalidInputError(f"{label} is empty or blank.", field_name)
    return trimmed


def format_email_address(email_address: Optional[str]) -> str:
    """
    Normalize an email address.

    Lower-cases the address and, for Gmail domains, drops every ``.`` from
    the local part since Gmail ignores them.

    Raises:
        InvalidInputError: If the address is blank, contains whitespace,
            or is not of the form ``user@domain``.
    """
    trimmed = _require_text(email_address, "Email address", "email_address")
    if _WHITESPACE.search(trimmed):
        raise InvalidInputError(
            "Email address contains intermediate whitespace.", "email_address"
        )

    parts = trimmed.lower().split("@")
    if len(parts) != 2:
        raise InvalidInputError(
            "Email address is not of the form user@domain.", "email_address"
        )

    username, domain = parts
    if not username:
        raise InvalidInputError(
            "Email address without the domain is empty.", "email_address"
        )
    if not domain:
        raise InvalidInputError("Domain of email address is empty.", "email_address")

    if domain in GMAIL_DOMAINS:
        username = username.replace(".", "")
        if not username:
            raise InvalidInputError(
                "Email address without the domain is empty after normalization.",
                "email_address",
            )

    return f"{username}@{domain}"


def format_phone_number(phone_number: Optional[str]) -> str:
    """
    Normalize a phone number to ``+`` followed by its digits.

    No country code or length validation is done.
    """
    trimmed = _require_text(phone_number, "Phone number", "phone_number")
    digits = _NON_DIGIT.sub("", trimmed)
    if not digits:
        raise InvalidInputError("Phone number contains no digits.", "phone_number")
    return f"+{digits}"


def format_given_name(given_name: Optional[str]) -> str:
    """Lower-case a given name and strip a leading Mr./Mrs./Ms./Dr."""
    trimmed = _require_text(given_name, "Given name", "given_name").lower()
    without_prefix = _GIVEN_NAME_PREFIX.sub("", trimmed, count=1).strip()
    if not without_prefix:
        raise InvalidInputError(
            "Given name consists solely of a prefix.", "given_name"
        )
    return without_prefix


def format_family_name(family_name: Optional[str]) -> str:
    """
    Lower-case a family name and strip trailing suffixes.

    Suffixes are removed one at a time until none is left, so chained
    suffixes such as ``"smith, jr. dds"`` reduce to ``"smith"``.
    """
    without_suffix = _require_text(family_name, "Family name", "family_name").lower()
    while _FAMILY_NAME_SUFFIX.search(without_suffix):
        without_suffix = _FAMILY_NAME_SUFFIX.sub("", without_suffix, count=1)

    # "smith , jr" leaves "smith " behind
    without_suffix = without_suffix.rstrip()
    if not without_suffix:
        raise InvalidInputError(
            "Family name consists solely of a suffix.", "family_name"
        )
    return without_suffix


def format_region_code(region_code: Optional[str]) -> str:
    """Upper-case a two-letter region code (e.g. ``"us"`` -> ``"US"``)."""
    trimmed = _require_text(region_code, "Region code", "region_code").upper()
    if len(trimmed) != 2:
        raise InvalidInputError(
            f"Region code length is {len(trimmed)}. Length must be 2.", "region_code"
        )
    if not _REGION_CODE.fullmatch(trimmed):
        raise InvalidInputError(
            "Region code contains characters other than A-Z.", "region_code"
        )
    return trimmed


def format_postal_code(postal_code: Optional[str]) -> str:
    return _require_text(postal_code, "Postal code", "postal_code")
