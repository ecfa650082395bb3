"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Dict, List

import pytest

from piiprep import Encoding, UserDataFormatter
from piiprep.ingest import build_destination


@pytest.fixture(autouse=True)
def clear_encoding_env(monkeypatch):
    """Keep a PIIPREP_ENCODING from the environment out of the tests."""
    monkeypatch.delenv("PIIPREP_ENCODING", raising=False)


@pytest.fixture
def formatter() -> UserDataFormatter:
    """Provide a hex formatter."""
    return UserDataFormatter(encoding=Encoding.HEX)


@pytest.fixture
def destination():
    """Provide a Google Ads destination."""
    return build_destination(
        operating_account_type="GOOGLE_ADS",
        operating_account_id="1234567890",
        product_destination_id="987654",
    )


@pytest.fixture
def member_csv_path(tmp_path) -> Path:
    """Provide a member CSV with one valid, one partly valid and one empty row."""
    path = tmp_path / "members.csv"
    path.write_text(
        "email_1,email_2,phone_1,notes\n"
        "alexz@example.com,  ALEXZ@EXAMPLE.com ,+1 800-555-0100,vip\n"
        "not-an-email,,++++,\n"
        ",,,\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def sample_event_rows() -> List[Dict]:
    """Provide raw event rows as they appear in an event JSON file."""
    return [
        {
            "timestamp": "2024-01-15T10:30:00Z",
            "transactionId": "txn-001",
            "eventSource": "WEB",
            "gclid": "abc123",
            "currency": "USD",
            "value": 42.5,
            "emails": ["alexz@example.com", "bad email"],
            "phoneNumbers": ["1-800-555-0100"],
        },
        {
            "timestamp": "not a timestamp",
            "transactionId": "txn-002",
        },
        {
            "timestamp": "2024-01-16T08:00:00Z",
        },
        {
            "timestamp": "2024-01-17T08:00:00Z",
            "transactionId": "txn-004",
            "eventSource": "CARRIER_PIGEON",
        },
        {
            "timestamp": "2024-01-18T08:00:00+02:00",
            "transactionId": "txn-005",
            "emails": ["@example.com"],
        },
    ]


@pytest.fixture
def event_json_path(tmp_path, sample_event_rows) -> Path:
    """Provide an event JSON file."""
    path = tmp_path / "events.json"
    path.write_text(json.dumps(sample_event_rows), encoding="utf-8")
    return path
