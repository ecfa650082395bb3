"""Test member/event readers and request builders."""

import json
import logging

import pytest
from pydantic import ValidationError

from piiprep import Encoding, IngestFileError, InvalidInputError
from piiprep.ingest import (
    batched,
    build_audience_members,
    build_audience_members_requests,
    build_destination,
    build_events,
    build_events_requests,
    build_user_data,
    convert_to_account_type,
    read_event_json,
    read_member_csv,
)
from piiprep.schemas import (
    AccountType,
    AudienceMember,
    EventRow,
    EventSource,
    MemberRow,
    UserData,
    UserIdentifier,
)

ALEXZ_HEX = "509e933019bb285a134a9334b8bb679dff79d0ce023d529af4bd744d47b4fd8a"
PHONE_HEX = "fb4f73a6ec5fdb7077d564cdd22c3554b43ce49168550c3b12c547b78c517b30"
PHONE_BASE64 = "+09zpuxf23B31WTN0iw1VLQ85JFoVQw7EsVHt4xRezA="


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


class TestReadMemberCsv:
    """Test reading audience members from CSV."""

    def test_reads_rows_with_data(self, member_csv_path):
        rows = read_member_csv(member_csv_path)

        assert len(rows) == 2
        assert rows[0].emails == ["alexz@example.com", "ALEXZ@EXAMPLE.com"]
        assert rows[0].phone_numbers == ["+1 800-555-0100"]
        assert rows[1].emails == ["not-an-email"]
        assert rows[1].phone_numbers == ["++++"]

    def test_warns_on_unknown_columns_and_empty_rows(self, member_csv_path, caplog):
        with caplog.at_level(logging.WARNING, logger="piiprep.ingest.readers"):
            read_member_csv(member_csv_path)

        assert "Ignoring unrecognized field: notes" in caplog.text
        assert "Ignoring line 4. No data." in caplog.text

    def test_short_and_long_rows(self, tmp_path):
        path = tmp_path / "ragged.csv"
        path.write_text("email_1,phone_1\nquinn@example.com\n,5550100,extra\n")

        rows = read_member_csv(path)

        assert rows[0].emails == ["quinn@example.com"]
        assert rows[0].phone_numbers == []
        assert rows[1].phone_numbers == ["5550100"]


class TestReadEventJson:
    """Test reading events from JSON."""

    def test_reads_rows(self, event_json_path):
        rows = read_event_json(event_json_path)

        assert len(rows) == 5
        assert rows[0].transaction_id == "txn-001"
        assert rows[0].event_source == "WEB"
        assert rows[0].phone_numbers == ["1-800-555-0100"]
        assert rows[2].transaction_id is None
        assert rows[2].emails is None

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text("[{")
        with pytest.raises(IngestFileError, match="Invalid JSON"):
            read_event_json(path)

    def test_not_an_array(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps({"timestamp": "2024-01-15T10:30:00Z"}))
        with pytest.raises(IngestFileError, match="JSON array"):
            read_event_json(path)

    def test_element_not_an_object(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps(["txn-001"]))
        with pytest.raises(IngestFileError, match="not an object"):
            read_event_json(path)

    def test_malformed_element_skipped(self, tmp_path, caplog):
        path = tmp_path / "events.json"
        path.write_text(
            json.dumps(
                [
                    {"timestamp": "2024-01-15T10:30:00Z", "transactionId": "ok-1"},
                    {"timestamp": "2024-01-15T10:30:00Z", "transactionId": 12345},
                    {"transactionId": "t", "emails": "a@b.com"},
                    {"transactionId": "ok-2", "emails": [None]},
                ]
            )
        )

        with caplog.at_level(logging.WARNING, logger="piiprep.ingest.readers"):
            rows = read_event_json(path)

        assert [row.transaction_id for row in rows] == ["ok-1"]
        assert "Skipping event #1" in caplog.text
        assert "transactionId" in caplog.text
        assert "Skipping event #2" in caplog.text
        assert "Skipping event #3" in caplog.text
        assert "a@b.com" not in caplog.text


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


class TestBuildUserData:
    """Test hashing identifiers into UserData."""

    def test_hashes_valid_values(self, formatter):
        user_data = build_user_data(
            ["alexz@example.com"], ["+1 800 555 0100"], formatter
        )

        assert user_data.user_identifiers == [
            UserIdentifier(email_address=ALEXZ_HEX),
            UserIdentifier(phone_number=PHONE_HEX),
        ]

    def test_skips_invalid_values_without_logging_them(self, formatter, caplog):
        with caplog.at_level(logging.WARNING, logger="piiprep.ingest.builders"):
            user_data = build_user_data(
                ["not-an-email", "alexz@example.com"],
                ["no digits"],
                formatter,
                record_label="member #3",
            )

        assert len(user_data.user_identifiers) == 1
        assert "Invalid email address in member #3" in caplog.text
        assert "Invalid phone number in member #3" in caplog.text
        assert "not-an-email" not in caplog.text
        assert "no digits" not in caplog.text

    def test_encoding_override(self, formatter):
        user_data = build_user_data([], ["+18005550100"], formatter, Encoding.BASE64)
        assert user_data.user_identifiers[0].phone_number == PHONE_BASE64

    def test_unknown_encoding_raises(self, formatter):
        with pytest.raises(InvalidInputError):
            build_user_data(["alexz@example.com"], [], formatter, "rot13")


class TestBuildAudienceMembers:
    """Test building audience members."""

    def test_builds_members(self, formatter, member_csv_path):
        members = build_audience_members(read_member_csv(member_csv_path), formatter)

        assert len(members) == 1
        identifiers = members[0].user_data.user_identifiers
        assert [i.email_address for i in identifiers[:2]] == [ALEXZ_HEX, ALEXZ_HEX]
        assert identifiers[2].phone_number == PHONE_HEX

    def test_skips_members_without_identifiers(self, formatter, caplog):
        rows = [MemberRow(emails=["@example.com"], phone_numbers=["---"])]
        with caplog.at_level(logging.WARNING, logger="piiprep.ingest.builders"):
            members = build_audience_members(rows, formatter)

        assert members == []
        assert "Ignoring member #0. No valid identifiers." in caplog.text


class TestBuildEvents:
    """Test building events."""

    def test_builds_valid_events(self, formatter, sample_event_rows):
        rows = [EventRow.model_validate(row) for row in sample_event_rows]
        events = build_events(rows, formatter)

        assert [e.transaction_id for e in events] == ["txn-001", "txn-005"]

        first = events[0]
        assert first.event_source == EventSource.WEB
        assert first.ad_identifiers.gclid == "abc123"
        assert first.currency == "USD"
        assert first.conversion_value == 42.5
        assert first.user_data.user_identifiers == [
            UserIdentifier(email_address=ALEXZ_HEX),
            UserIdentifier(phone_number=PHONE_HEX),
        ]

        # Invalid email dropped, event kept without user data
        assert events[1].user_data is None
        assert events[1].event_timestamp.utcoffset().total_seconds() == 7200

    def test_logs_skipped_rows(self, formatter, sample_event_rows, caplog):
        rows = [EventRow.model_validate(row) for row in sample_event_rows]
        with caplog.at_level(logging.WARNING, logger="piiprep.ingest.builders"):
            build_events(rows, formatter)

        assert "Invalid timestamp format for event #1" in caplog.text
        assert "Skipping event #2 with no transaction ID" in caplog.text
        assert "Skipping event #3 with invalid event_source: CARRIER_PIGEON" in caplog.text

    def test_zero_value_not_copied(self, formatter):
        rows = [EventRow(timestamp="2024-01-15T10:30:00Z", transaction_id="t", value=0)]
        events = build_events(rows, formatter)
        assert events[0].conversion_value is None

    def test_event_payload(self, formatter, sample_event_rows):
        rows = [EventRow.model_validate(sample_event_rows[0])]
        payload = build_events(rows, formatter)[0].to_payload()

        assert payload["eventTimestamp"].startswith("2024-01-15T10:30:00")
        assert payload["transactionId"] == "txn-001"
        assert payload["eventSource"] == "WEB"
        assert payload["adIdentifiers"] == {"gclid": "abc123"}
        assert payload["conversionValue"] == 42.5
        assert payload["userData"]["userIdentifiers"][0] == {"emailAddress": ALEXZ_HEX}

    def test_timestamp_without_offset_is_utc(self, formatter):
        rows = [EventRow(timestamp="2024-01-15T10:30:00", transaction_id="t")]
        event = build_events(rows, formatter)[0]

        assert event.event_timestamp.utcoffset().total_seconds() == 0
        assert event.to_payload()["eventTimestamp"] == "2024-01-15T10:30:00Z"


class TestDestination:
    """Test building destinations."""

    def test_convert_to_account_type(self):
        assert convert_to_account_type("GOOGLE_ADS", "x") is AccountType.GOOGLE_ADS

    def test_convert_invalid_account_type(self):
        with pytest.raises(ValueError, match="Invalid operating_account_type: ADS"):
            convert_to_account_type("ADS", "operating_account_type")

    def test_operating_account_only(self, destination):
        assert destination.to_payload() == {
            "operatingAccount": {"accountType": "GOOGLE_ADS", "accountId": "1234567890"},
            "productDestinationId": "987654",
        }

    def test_optional_accounts(self):
        destination = build_destination(
            operating_account_type="DISPLAY_VIDEO_ADVERTISER",
            operating_account_id="111",
            product_destination_id="222",
            login_account_type="DATA_PARTNER",
            login_account_id="333",
            linked_account_type="DISPLAY_VIDEO_PARTNER",
            linked_account_id="444",
        )

        assert destination.login_account.account_type is AccountType.DATA_PARTNER
        assert destination.linked_account.account_id == "444"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"login_account_type": "GOOGLE_ADS"},
            {"login_account_id": "333"},
            {"linked_account_type": "GOOGLE_ADS"},
            {"linked_account_id": "444"},
        ],
    )
    def test_incomplete_optional_account(self, kwargs):
        with pytest.raises(ValueError, match="either both or neither"):
            build_destination("GOOGLE_ADS", "111", "222", **kwargs)

    def test_invalid_login_account_type(self):
        with pytest.raises(ValueError, match="Invalid login_account_type"):
            build_destination("GOOGLE_ADS", "111", "222", "NOPE", "333")


class TestBatching:
    """Test splitting records into requests."""

    def test_batched(self):
        assert list(batched([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]
        assert list(batched([], 2)) == []

    def test_batched_invalid_size(self):
        with pytest.raises(ValueError):
            list(batched([1], 0))

    def _members(self, count):
        return [
            AudienceMember(
                user_data=UserData(
                    user_identifiers=[UserIdentifier(email_address=f"{i:064x}")]
                )
            )
            for i in range(count)
        ]

    def test_audience_requests_split(self, destination):
        requests = build_audience_members_requests(
            self._members(5), destination, Encoding.HEX, max_per_request=2
        )

        assert [len(r.audience_members) for r in requests] == [2, 2, 1]

    def test_audience_request_payload(self, destination):
        requests = build_audience_members_requests(
            self._members(1), destination, "base64", validate_only=False
        )
        payload = requests[0].to_payload()

        assert payload["encoding"] == "BASE64"
        assert payload["validateOnly"] is False
        assert payload["consent"] == {
            "adUserData": "CONSENT_GRANTED",
            "adPersonalization": "CONSENT_GRANTED",
        }
        assert payload["termsOfService"] == {
            "customerMatchTermsOfServiceStatus": "ACCEPTED"
        }
        assert payload["destinations"] == [destination.to_payload()]
        assert len(payload["audienceMembers"]) == 1

    def test_events_requests(self, formatter, destination, sample_event_rows):
        rows = [EventRow.model_validate(row) for row in sample_event_rows]
        events = build_events(rows, formatter)
        requests = build_events_requests(events, destination, formatter.encoding)

        assert len(requests) == 1
        payload = requests[0].to_payload()
        assert payload["encoding"] == "HEX"
        assert payload["validateOnly"] is True
        assert "termsOfService" not in payload
        assert len(payload["events"]) == 2

    def test_no_records_no_requests(self, destination):
        assert build_events_requests([], destination, Encoding.HEX) == []


class TestUserIdentifier:
    """Test the one-of constraint on identifiers."""

    def test_requires_one_field(self):
        with pytest.raises(ValidationError):
            UserIdentifier()

    def test_rejects_both_fields(self):
        with pytest.raises(ValidationError):
            UserIdentifier(email_address=ALEXZ_HEX, phone_number=PHONE_HEX)
