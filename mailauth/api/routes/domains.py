"""
Domain management, DNS status and ownership verification endpoints.
"""
from fastapi import APIRouter, Depends

from mailauth.api.dependencies import (
    get_actor_id,
    get_prober,
    get_resolver,
    get_store,
    get_verifier,
)
from mailauth.core.dkim_probe import SelectorProber
from mailauth.core.dns_client import TXTResolver
from mailauth.core.dns_status import check_dns_status, refresh_domain_records
from mailauth.core.exceptions import NotFoundError
from mailauth.core.sender_classifier import classify_spf_record
from mailauth.core.validation import validate_domain
from mailauth.core.verification import (
    DomainVerifier,
    generate_verification_token,
    verification_instructions,
)
from mailauth.database.store import MailAuthDatabase
from mailauth.models.dns import DKIMInspection, DNSRefreshResult, DomainDNSStatus
from mailauth.models.domain import (
    CreateDomainRequest,
    DomainListResponse,
    DomainRecord,
    DomainResponse,
    VerificationResponse,
)
from mailauth.models.sender import SPFMatchesResponse

router = APIRouter(prefix="/api/orgs/{org_id}/domains", tags=["domains"])


def _get_domain(db: MailAuthDatabase, org_id: str, domain_id: str) -> DomainRecord:
    domain = db.get_domain(org_id, domain_id)
    if domain is None:
        raise NotFoundError("Domain not found")
    return domain


def _domain_response(domain: DomainRecord) -> DomainResponse:
    return DomainResponse(domain=domain, verification=verification_instructions(domain))


@router.post("", response_model=DomainResponse, status_code=201)
async def add_domain(
    org_id: str,
    request: CreateDomainRequest,
    db: MailAuthDatabase = Depends(get_store)
):
    """
    Add a domain to an organization.

    The verification token is generated here, once; the response tells the
    owner which TXT record to publish.
    """
    name = validate_domain(request.domain)
    domain = db.create_domain(org_id, name, generate_verification_token())
    return _domain_response(domain)


@router.get("", response_model=DomainListResponse)
async def list_domains(org_id: str, db: MailAuthDatabase = Depends(get_store)):
    domains = db.list_domains(org_id)
    return DomainListResponse(
        organization_id=org_id,
        domains_count=len(domains),
        domains=domains
    )


@router.get("/{domain_id}", response_model=DomainResponse)
async def get_domain(org_id: str, domain_id: str, db: MailAuthDatabase = Depends(get_store)):
    return _domain_response(_get_domain(db, org_id, domain_id))


@router.get("/{domain_id}/dns-status", response_model=DomainDNSStatus)
async def get_dns_status(
    org_id: str,
    domain_id: str,
    db: MailAuthDatabase = Depends(get_store),
    resolver: TXTResolver = Depends(get_resolver),
    prober: SelectorProber = Depends(get_prober)
):
    """
    Current SPF, DKIM and DMARC state of a domain.

    The three checks run concurrently; a hard DNS failure of one of them is
    reported in its ``error`` field.
    """
    domain = _get_domain(db, org_id, domain_id)
    return await check_dns_status(resolver, domain.domain, prober)


@router.post("/{domain_id}/verify", response_model=VerificationResponse)
async def verify_domain(
    org_id: str,
    domain_id: str,
    actor_id: str = Depends(get_actor_id),
    db: MailAuthDatabase = Depends(get_store),
    verifier: DomainVerifier = Depends(get_verifier)
):
    """
    Verify domain ownership against the published TXT token.

    Returns:
        The verified domain

    Raises 400 with the expected token and the records found when the token
    is not published.
    """
    domain = _get_domain(db, org_id, domain_id)
    verified = await verifier.verify(domain, actor_id)
    return VerificationResponse(success=True, domain=verified)


@router.post("/{domain_id}/dns-refresh", response_model=DNSRefreshResult)
async def refresh_dns(
    org_id: str,
    domain_id: str,
    db: MailAuthDatabase = Depends(get_store),
    resolver: TXTResolver = Depends(get_resolver)
):
    """Re-fetch SPF and DMARC, cache them and report what changed."""
    domain = _get_domain(db, org_id, domain_id)
    return await refresh_domain_records(db, resolver, domain)


@router.get("/{domain_id}/dkim", response_model=DKIMInspection)
async def inspect_dkim(
    org_id: str,
    domain_id: str,
    db: MailAuthDatabase = Depends(get_store),
    prober: SelectorProber = Depends(get_prober)
):
    """Probe every known DKIM selector and return the published records."""
    domain = _get_domain(db, org_id, domain_id)
    return await prober.inspect(domain.domain)


@router.get("/{domain_id}/spf-matches", response_model=SPFMatchesResponse)
async def get_spf_matches(
    org_id: str,
    domain_id: str,
    db: MailAuthDatabase = Depends(get_store)
):
    """Classify the cached SPF record of a domain against known senders."""
    domain = _get_domain(db, org_id, domain_id)
    if not domain.spf_record:
        return SPFMatchesResponse(matches=[])

    senders = db.list_visible_senders(org_id)
    return SPFMatchesResponse(matches=classify_spf_record(domain.spf_record, senders))
