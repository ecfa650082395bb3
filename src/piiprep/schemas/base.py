"""Input rows and ingestion request payloads."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
from pydantic.alias_generators import to_camel

from ..formatter.digest import Encoding


class AccountType(str, Enum):
    """Type of a product account."""

    GOOGLE_ADS = "GOOGLE_ADS"
    DISPLAY_VIDEO_PARTNER = "DISPLAY_VIDEO_PARTNER"
    DISPLAY_VIDEO_ADVERTISER = "DISPLAY_VIDEO_ADVERTISER"
    DATA_PARTNER = "DATA_PARTNER"


class EventSource(str, Enum):
    """Where an event happened."""

    WEB = "WEB"
    APP = "APP"
    IN_STORE = "IN_STORE"
    PHONE = "PHONE"
    OTHER = "OTHER"


class ConsentStatus(str, Enum):
    CONSENT_GRANTED = "CONSENT_GRANTED"
    CONSENT_DENIED = "CONSENT_DENIED"


class TermsOfServiceStatus(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class ApiModel(BaseModel):
    """Base for payload models: camelCase on the wire, unset fields omitted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Input rows
# ---------------------------------------------------------------------------


class MemberRow(BaseModel):
    """Raw identifiers for one audience member, read from a CSV row."""

    emails: List[str] = Field(default_factory=list)
    phone_numbers: List[str] = Field(default_factory=list)


class EventRow(ApiModel):
    """One event record as it appears in an event JSON file."""

    timestamp: Optional[str] = None
    transaction_id: Optional[str] = None
    event_source: Optional[str] = None
    gclid: Optional[str] = None
    currency: Optional[str] = None
    value: Optional[float] = None
    emails: Optional[List[str]] = None
    phone_numbers: Optional[List[str]] = None


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class ProductAccount(ApiModel):
    account_type: AccountType
    account_id: str


class Destination(ApiModel):
    """Account and product destination records are ingested into."""

    operating_account: ProductAccount
    login_account: Optional[ProductAccount] = None
    linked_account: Optional[ProductAccount] = None
    product_destination_id: str


class UserIdentifier(ApiModel):
    """A single hashed identifier. Exactly one field is set."""

    email_address: Optional[str] = None
    phone_number: Optional[str] = None

    @model_validator(mode="after")
    def _check_one_of(self) -> "UserIdentifier":
        set_fields = [v for v in (self.email_address, self.phone_number) if v]
        if len(set_fields) != 1:
            raise ValueError(
                "UserIdentifier requires exactly one of email_address or phone_number"
            )
        return self


class UserData(ApiModel):
    user_identifiers: List[UserIdentifier] = Field(default_factory=list)


class AudienceMember(ApiModel):
    user_data: UserData


class AdIdentifiers(ApiModel):
    gclid: str


class Event(ApiModel):
    """A conversion event with optional hashed user data."""

    event_timestamp: datetime
    transaction_id: str
    event_source: Optional[EventSource] = None
    ad_identifiers: Optional[AdIdentifiers] = None
    currency: Optional[str] = None
    conversion_value: Optional[float] = None
    user_data: Optional[UserData] = None


class Consent(ApiModel):
    ad_user_data: ConsentStatus = ConsentStatus.CONSENT_GRANTED
    ad_personalization: ConsentStatus = ConsentStatus.CONSENT_GRANTED


class TermsOfService(ApiModel):
    customer_match_terms_of_service_status: TermsOfServiceStatus = (
        TermsOfServiceStatus.ACCEPTED
    )


class _IngestRequest(ApiModel):
    destinations: List[Destination]
    consent: Consent = Field(default_factory=Consent)
    encoding: Encoding
    validate_only: bool = True

    @field_serializer("encoding")
    def _serialize_encoding(self, encoding: Encoding) -> str:
        # The API names encodings HEX / BASE64
        return encoding.name


class IngestAudienceMembersRequest(_IngestRequest):
    audience_members: List[AudienceMember]
    terms_of_service: TermsOfService = Field(default_factory=TermsOfService)


class IngestEventsRequest(_IngestRequest):
    events: List[Event]
