"""Data models for the application."""
from .domain import (
    DomainRecord,
    CreateDomainRequest,
    VerificationInstructions,
    DomainResponse,
    DomainListResponse,
    VerificationResponse
)
from .dns import (
    RecordLookupResult,
    RecordStatus,
    DKIMStatus,
    DomainDNSStatus,
    DKIMSelectorRecord,
    DKIMInspection,
    RecordChange,
    DNSRefreshResult,
    ValidationIssue,
    RecordValidationRequest,
    RecordValidationResult
)
from .sender import (
    KnownSender,
    SenderSummary,
    KnownSenderCreate,
    KnownSenderUpdate,
    SPFResolutionResult,
    SPFPreviewRequest,
    SPFPreviewResponse,
    ResolveSPFResponse,
    ClassificationMatch,
    ClassifyRequest,
    SPFMatchesResponse,
    SourceMatchResponse
)

__all__ = [
    "DomainRecord",
    "CreateDomainRequest",
    "VerificationInstructions",
    "DomainResponse",
    "DomainListResponse",
    "VerificationResponse",
    "RecordLookupResult",
    "RecordStatus",
    "DKIMStatus",
    "DomainDNSStatus",
    "DKIMSelectorRecord",
    "DKIMInspection",
    "RecordChange",
    "DNSRefreshResult",
    "ValidationIssue",
    "RecordValidationRequest",
    "RecordValidationResult",
    "KnownSender",
    "SenderSummary",
    "KnownSenderCreate",
    "KnownSenderUpdate",
    "SPFResolutionResult",
    "SPFPreviewRequest",
    "SPFPreviewResponse",
    "ResolveSPFResponse",
    "ClassificationMatch",
    "ClassifyRequest",
    "SPFMatchesResponse",
    "SourceMatchResponse"
]
