"""Turn input rows into hashed identifiers and batched ingestion requests."""

import logging
from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional, Sequence, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from ..config import MAX_EVENTS_PER_REQUEST, MAX_MEMBERS_PER_REQUEST
from ..errors import InvalidInputError
from ..formatter import Encoding, UserDataFormatter
from ..schemas.base import (
    AccountType,
    AdIdentifiers,
    AudienceMember,
    Destination,
    Event,
    EventRow,
    EventSource,
    IngestAudienceMembersRequest,
    IngestEventsRequest,
    MemberRow,
    ProductAccount,
    UserData,
    UserIdentifier,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_timestamp_adapter = TypeAdapter(datetime)


def _resolve_encoding(
    formatter: UserDataFormatter, encoding: Union[Encoding, str, None]
) -> Encoding:
    # Fail once up front rather than once per skipped value
    return formatter.encoding if encoding is None else Encoding.parse(encoding)


def build_user_data(
    emails: Iterable[str],
    phone_numbers: Iterable[str],
    formatter: UserDataFormatter,
    encoding: Union[Encoding, str, None] = None,
    record_label: str = "record",
) -> UserData:
    """
    Hash every valid email and phone number into a UserData.

    Values the formatter rejects are skipped with a warning. The warning
    names the record and field type but never the raw value.
    """
    encoding = _resolve_encoding(formatter, encoding)
    user_data = UserData()

    for email in emails:
        try:
            processed = formatter.process_email_address(email, encoding)
        except InvalidInputError as e:
            logger.warning("Invalid email address in %s: %s Skipping.", record_label, e)
            continue
        user_data.user_identifiers.append(UserIdentifier(email_address=processed))

    for phone_number in phone_numbers:
        try:
            processed = formatter.process_phone_number(phone_number, encoding)
        except InvalidInputError as e:
            logger.warning("Invalid phone number in %s: %s Skipping.", record_label, e)
            continue
        user_data.user_identifiers.append(UserIdentifier(phone_number=processed))

    return user_data


def build_audience_members(
    rows: Iterable[MemberRow],
    formatter: UserDataFormatter,
    encoding: Union[Encoding, str, None] = None,
) -> List[AudienceMember]:
    """Build one AudienceMember per row that yields at least one identifier."""
    encoding = _resolve_encoding(formatter, encoding)
    members: List[AudienceMember] = []
    for index, row in enumerate(rows):
        user_data = build_user_data(
            row.emails,
            row.phone_numbers,
            formatter,
            encoding,
            record_label=f"member #{index}",
        )
        if user_data.user_identifiers:
            members.append(AudienceMember(user_data=user_data))
        else:
            logger.warning("Ignoring member #%d. No valid identifiers.", index)
    return members


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = _timestamp_adapter.validate_python(value)
    except ValidationError:
        return None
    # Timestamps without an offset are taken as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_events(
    rows: Iterable[EventRow],
    formatter: UserDataFormatter,
    encoding: Union[Encoding, str, None] = None,
) -> List[Event]:
    """
    Build Events from event rows.

    Rows with an unparseable timestamp, no transaction ID or an unknown event
    source are skipped with a warning. Invalid emails and phone numbers are
    dropped from the row's user data without skipping the event.
    """
    encoding = _resolve_encoding(formatter, encoding)
    events: List[Event] = []
    for index, row in enumerate(rows):
        timestamp = _parse_timestamp(row.timestamp)
        if timestamp is None:
            logger.warning(
                "Invalid timestamp format for event #%d: %r. Skipping row.",
                index,
                row.timestamp,
            )
            continue

        if not row.transaction_id:
            logger.warning("Skipping event #%d with no transaction ID", index)
            continue

        event_source = None
        if row.event_source:
            try:
                event_source = EventSource(row.event_source)
            except ValueError:
                logger.warning(
                    "Skipping event #%d with invalid event_source: %s",
                    index,
                    row.event_source,
                )
                continue

        event = Event(
            event_timestamp=timestamp,
            transaction_id=row.transaction_id,
            event_source=event_source,
        )
        if row.gclid:
            event.ad_identifiers = AdIdentifiers(gclid=row.gclid)
        if row.currency:
            event.currency = row.currency
        if row.value:
            event.conversion_value = row.value

        user_data = build_user_data(
            row.emails or [],
            row.phone_numbers or [],
            formatter,
            encoding,
            record_label=f"event #{index}",
        )
        if user_data.user_identifiers:
            event.user_data = user_data

        events.append(event)
    return events


def convert_to_account_type(proposed_value: str, param_name: str) -> AccountType:
    """
    Resolve an AccountType by name.

    Raises:
        ValueError: If the name is not an AccountType.
    """
    try:
        return AccountType[proposed_value]
    except KeyError:
        raise ValueError(f"Invalid {param_name}: {proposed_value}") from None


def _product_account(
    account_type: Optional[str], account_id: Optional[str], param_prefix: str
) -> Optional[ProductAccount]:
    if not account_type and not account_id:
        return None
    if not account_type or not account_id:
        raise ValueError(
            f"Must specify either both or neither of {param_prefix} account type "
            f"and {param_prefix} account ID"
        )
    return ProductAccount(
        account_type=convert_to_account_type(
            account_type, f"{param_prefix}_account_type"
        ),
        account_id=account_id,
    )


def build_destination(
    operating_account_type: str,
    operating_account_id: str,
    product_destination_id: str,
    login_account_type: Optional[str] = None,
    login_account_id: Optional[str] = None,
    linked_account_type: Optional[str] = None,
    linked_account_id: Optional[str] = None,
) -> Destination:
    """
    Build a Destination. The login and linked accounts are optional.

    Raises:
        ValueError: If an account type is unknown, or only one of an optional
            account's type and ID is given.
    """
    operating_account = ProductAccount(
        account_type=convert_to_account_type(
            operating_account_type, "operating_account_type"
        ),
        account_id=operating_account_id,
    )
    return Destination(
        operating_account=operating_account,
        login_account=_product_account(login_account_type, login_account_id, "login"),
        linked_account=_product_account(
            linked_account_type, linked_account_id, "linked"
        ),
        product_destination_id=product_destination_id,
    )


def batched(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` items."""
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def build_audience_members_requests(
    members: Sequence[AudienceMember],
    destination: Destination,
    encoding: Union[Encoding, str],
    validate_only: bool = True,
    max_per_request: int = MAX_MEMBERS_PER_REQUEST,
) -> List[IngestAudienceMembersRequest]:
    """Split audience members into requests of at most ``max_per_request``."""
    encoding = Encoding.parse(encoding)
    return [
        IngestAudienceMembersRequest(
            destinations=[destination],
            audience_members=list(batch),
            encoding=encoding,
            validate_only=validate_only,
        )
        for batch in batched(members, max_per_request)
    ]


def build_events_requests(
    events: Sequence[Event],
    destination: Destination,
    encoding: Union[Encoding, str],
    validate_only: bool = True,
    max_per_request: int = MAX_EVENTS_PER_REQUEST,
) -> List[IngestEventsRequest]:
    """Split events into requests of at most ``max_per_request``."""
    encoding = Encoding.parse(encoding)
    return [
        IngestEventsRequest(
            destinations=[destination],
            events=list(batch),
            encoding=encoding,
            validate_only=validate_only,
        )
        for batch in batched(events, max_per_request)
    ]
