"""
Data models for the known-sender catalog, SPF expansion and classification.
"""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel


class KnownSender(BaseModel):
    """Catalog entry for a recognized sending service."""
    id: str
    name: str
    description: Optional[str] = None
    category: str  # "marketing", "transactional", "corporate", "security", ...
    logo_url: Optional[str] = None
    website: Optional[str] = None
    spf_include: Optional[str] = None  # e.g. "sendgrid.net"
    ip_ranges: List[str] = []
    dkim_domains: List[str] = []
    spf_resolved_at: Optional[datetime] = None
    is_global: bool = False
    organization_id: Optional[str] = None  # None for global entries
    created_at: datetime
    updated_at: datetime


class SenderSummary(BaseModel):
    """Minimal sender descriptor attached to a classification match."""
    id: str
    name: str
    category: str
    logo_url: Optional[str] = None
    website: Optional[str] = None

    @classmethod
    def from_sender(cls, sender: KnownSender) -> "SenderSummary":
        return cls(
            id=sender.id,
            name=sender.name,
            category=sender.category,
            logo_url=sender.logo_url,
            website=sender.website,
        )


class KnownSenderCreate(BaseModel):
    """Request payload for creating an organization-scoped sender."""
    name: str
    category: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    website: Optional[str] = None
    spf_include: Optional[str] = None
    ip_ranges: List[str] = []
    dkim_domains: List[str] = []


class KnownSenderUpdate(BaseModel):
    """Partial update; fields left out keep their stored value."""
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None
    website: Optional[str] = None
    spf_include: Optional[str] = None
    ip_ranges: Optional[List[str]] = None
    dkim_domains: Optional[List[str]] = None


class SPFResolutionResult(BaseModel):
    """Flattened expansion of an SPF include."""
    ip_ranges: List[str] = []
    includes: List[str] = []
    errors: List[str] = []


class SPFPreviewRequest(BaseModel):
    """Request payload for resolving an include without saving."""
    spf_include: str


class SPFPreviewResponse(BaseModel):
    """Resolution of an include that was not persisted."""
    spf_include: str
    ip_ranges: List[str]
    includes: List[str]
    errors: List[str]
    success: bool


class ResolveSPFResponse(BaseModel):
    """Sender after its ranges were refreshed from SPF."""
    sender: KnownSender
    resolved: SPFResolutionResult


class ClassificationMatch(BaseModel):
    """One SPF mechanism and the known sender it belongs to, if any."""
    type: Literal["include", "ip4", "ip6"]
    value: str
    sender: Optional[SenderSummary] = None


class ClassifyRequest(BaseModel):
    """Request payload for classifying an arbitrary SPF record."""
    spf_record: str


class SPFMatchesResponse(BaseModel):
    """Classification of every include/ip4/ip6 mechanism of a record."""
    matches: List[ClassificationMatch] = []


class SourceMatchResponse(BaseModel):
    """Known sender matched for an observed sending source."""
    ip: Optional[str] = None
    dkim_domains: List[str] = []
    matched_by: Optional[Literal["ip", "dkim"]] = None
    sender: Optional[SenderSummary] = None
