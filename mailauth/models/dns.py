"""
Response models for DNS lookups, domain status and record validation.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class RecordLookupResult(BaseModel):
    """Outcome of a single TXT lookup for an authentication record."""
    domain: str  # host actually queried, e.g. "_dmarc.example.com"
    record: Optional[str] = None  # first record matching the expected kind
    all_records: List[str] = []
    found: bool = False


class RecordStatus(BaseModel):
    """SPF or DMARC presence for a domain."""
    valid: bool = False
    record: Optional[str] = None
    error: Optional[str] = None  # set on hard DNS failure, never on a miss


class DKIMStatus(BaseModel):
    """Selectors from the probe set that publish a key."""
    valid: bool = False
    selectors: List[str] = []


class DomainDNSStatus(BaseModel):
    """Combined SPF/DKIM/DMARC posture of a domain."""
    domain: str
    spf: RecordStatus
    dkim: DKIMStatus
    dmarc: RecordStatus


class DKIMSelectorRecord(BaseModel):
    """Probe result for one selector of the known-selector table."""
    selector: str
    record: Optional[str] = None
    valid: bool = False


class DKIMInspection(BaseModel):
    """Per-selector results for the full known-selector table."""
    domain: str
    selectors: List[DKIMSelectorRecord]
    checked_at: datetime


class RecordChange(BaseModel):
    """Fresh value of a cached record and whether it moved."""
    record: Optional[str] = None
    valid: bool = False
    changed: bool = False
    previous: Optional[str] = None


class DNSRefreshResult(BaseModel):
    """Result of re-fetching and caching SPF/DMARC for a stored domain."""
    domain: str
    spf: RecordChange
    dmarc: RecordChange
    last_checked: datetime


class ValidationIssue(BaseModel):
    """A problem or hint found in a published record."""
    severity: str  # "error", "warning", "info"
    message: str
    field: Optional[str] = None


class RecordValidationRequest(BaseModel):
    """Request payload for record validation."""
    type: str  # "dmarc", "spf", "dkim"
    record: Optional[str] = None


class RecordValidationResult(BaseModel):
    """Validation issues and recommendations for a record."""
    type: str
    record: Optional[str] = None
    issues: List[ValidationIssue] = []
    recommendations: List[str] = []
