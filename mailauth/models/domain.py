"""
Data models for monitored domains and ownership verification.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class DomainRecord(BaseModel):
    """A domain under monitoring, scoped to one organization."""
    id: str
    organization_id: str
    domain: str
    verification_token: Optional[str] = None  # "dmarc-verify=<hex>", generated once
    verified_at: Optional[datetime] = None  # immutable once set
    verified_by: Optional[str] = None
    spf_record: Optional[str] = None
    dmarc_record: Optional[str] = None
    last_dns_check: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_verified(self) -> bool:
        return self.verified_at is not None


class CreateDomainRequest(BaseModel):
    """Request payload for adding a domain."""
    domain: str


class VerificationInstructions(BaseModel):
    """Where and what to publish to prove control of a domain."""
    txt_name: str
    txt_value: str


class DomainResponse(BaseModel):
    """Domain record plus the TXT record the owner has to publish."""
    domain: DomainRecord
    verification: VerificationInstructions


class DomainListResponse(BaseModel):
    """All domains of an organization."""
    organization_id: str
    domains_count: int
    domains: List[DomainRecord]


class VerificationResponse(BaseModel):
    """Successful ownership verification."""
    success: bool = True
    domain: DomainRecord
