"""
Configuration for piiprep.

Request limits mirror the ingestion API; the default encoding can be
overridden with the PIIPREP_ENCODING environment variable.
"""

import os

# Maximum records the ingestion API accepts in a single request
MAX_MEMBERS_PER_REQUEST = 10000
MAX_EVENTS_PER_REQUEST = 10000

# Domains whose local part ignores dots
GMAIL_DOMAINS = frozenset({"gmail.com", "googlemail.com"})

DEFAULT_ENCODING = "hex"
ENCODING_ENV_VAR = "PIIPREP_ENCODING"


def get_default_encoding() -> str:
    """Return the encoding name configured in the environment, or hex."""
    return os.getenv(ENCODING_ENV_VAR, DEFAULT_ENCODING).strip().lower()


__all__ = [
    "MAX_MEMBERS_PER_REQUEST",
    "MAX_EVENTS_PER_REQUEST",
    "GMAIL_DOMAINS",
    "DEFAULT_ENCODING",
    "ENCODING_ENV_VAR",
    "get_default_encoding",
]
