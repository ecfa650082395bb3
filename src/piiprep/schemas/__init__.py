"""Data models for piiprep."""

from .base import (
    AccountType,
    AdIdentifiers,
    ApiModel,
    AudienceMember,
    Consent,
    ConsentStatus,
    Destination,
    Event,
    EventRow,
    EventSource,
    IngestAudienceMembersRequest,
    IngestEventsRequest,
    MemberRow,
    ProductAccount,
    TermsOfService,
    TermsOfServiceStatus,
    UserData,
    UserIdentifier,
)

__all__ = [
    "AccountType",
    "AdIdentifiers",
    "ApiModel",
    "AudienceMember",
    "Consent",
    "ConsentStatus",
    "Destination",
    "Event",
    "EventRow",
    "EventSource",
    "IngestAudienceMembersRequest",
    "IngestEventsRequest",
    "MemberRow",
    "ProductAccount",
    "TermsOfService",
    "TermsOfServiceStatus",
    "UserData",
    "UserIdentifier",
]
