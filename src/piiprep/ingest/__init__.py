"""
Batch ingestion helpers.

Reads member and event files, hashes their identifiers with a
UserDataFormatter, and assembles ingestion request payloads in batches.
"""

from .builders import (
    batched,
    build_audience_members,
    build_audience_members_requests,
    build_destination,
    build_events,
    build_events_requests,
    build_user_data,
    convert_to_account_type,
)
from .readers import read_event_json, read_member_csv

__all__ = [
    "batched",
    "build_audience_members",
    "build_audience_members_requests",
    "build_destination",
    "build_events",
    "build_events_requests",
    "build_user_data",
    "convert_to_account_type",
    "read_event_json",
    "read_member_csv",
]
