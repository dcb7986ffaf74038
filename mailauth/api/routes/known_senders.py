"""
Known-sender catalog, SPF include resolution and classification endpoints.

Reads see global senders plus the organization's own; writes only ever touch
organization senders.
"""
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from mailauth.api.dependencies import get_spf_resolver, get_store
from mailauth.core.exceptions import InvalidInputError
from mailauth.core.sender_classifier import classify_spf_record, match_source
from mailauth.core.spf_resolver import SPFIncludeResolver
from mailauth.database.store import MailAuthDatabase
from mailauth.models.sender import (
    ClassifyRequest,
    KnownSender,
    KnownSenderCreate,
    KnownSenderUpdate,
    ResolveSPFResponse,
    SenderSummary,
    SourceMatchResponse,
    SPFMatchesResponse,
    SPFPreviewRequest,
    SPFPreviewResponse,
)

router = APIRouter(prefix="/api/orgs/{org_id}", tags=["known-senders"])


@router.get("/known-senders", response_model=List[KnownSender])
async def list_known_senders(org_id: str, db: MailAuthDatabase = Depends(get_store)):
    """Global and organization senders, ordered by name."""
    return db.list_visible_senders(org_id)


@router.post("/known-senders", response_model=KnownSender, status_code=201)
async def create_known_sender(
    org_id: str,
    request: KnownSenderCreate,
    db: MailAuthDatabase = Depends(get_store)
):
    if not request.name.strip() or not request.category.strip():
        raise InvalidInputError("Name and category are required")
    return db.create_org_sender(org_id, request.model_dump())


@router.post("/known-senders/preview-spf", response_model=SPFPreviewResponse)
async def preview_spf(
    org_id: str,
    request: SPFPreviewRequest,
    spf_resolver: SPFIncludeResolver = Depends(get_spf_resolver)
):
    """
    Resolve an SPF include without saving anything.

    Returns:
        Ranges, traversed includes and any errors met on the way
    """
    result = await spf_resolver.resolve(request.spf_include)
    return SPFPreviewResponse(
        spf_include=request.spf_include,
        ip_ranges=result.ip_ranges,
        includes=result.includes,
        errors=result.errors,
        success=len(result.ip_ranges) > 0
    )


@router.get("/known-senders/match", response_model=SourceMatchResponse)
async def match_known_sender(
    org_id: str,
    ip: Optional[str] = Query(None),
    dkim_domain: List[str] = Query([]),
    db: MailAuthDatabase = Depends(get_store)
):
    """Identify the sender behind a sending IP and/or DKIM signing domains."""
    if not ip and not dkim_domain:
        raise InvalidInputError("Provide an ip or at least one dkim_domain")

    sender, matched_by = match_source(ip, dkim_domain, db.list_visible_senders(org_id))
    return SourceMatchResponse(
        ip=ip,
        dkim_domains=dkim_domain,
        matched_by=matched_by,
        sender=SenderSummary.from_sender(sender) if sender else None
    )


@router.get("/known-senders/{sender_id}", response_model=KnownSender)
async def get_known_sender(org_id: str, sender_id: str, db: MailAuthDatabase = Depends(get_store)):
    return db.get_visible_sender(org_id, sender_id)


@router.patch("/known-senders/{sender_id}", response_model=KnownSender)
async def update_known_sender(
    org_id: str,
    sender_id: str,
    request: KnownSenderUpdate,
    db: MailAuthDatabase = Depends(get_store)
):
    """Partial update of an organization sender; global senders are read-only."""
    updates = request.model_dump(exclude_unset=True)
    for key in ("name", "category"):
        if key in updates and not (updates[key] or "").strip():
            raise InvalidInputError("Name and category are required")
    return db.update_org_sender(org_id, sender_id, updates)


@router.delete("/known-senders/{sender_id}", status_code=204)
async def delete_known_sender(org_id: str, sender_id: str, db: MailAuthDatabase = Depends(get_store)):
    db.delete_org_sender(org_id, sender_id)
    return Response(status_code=204)


@router.post("/known-senders/{sender_id}/resolve-spf", response_model=ResolveSPFResponse)
async def resolve_sender_spf(
    org_id: str,
    sender_id: str,
    db: MailAuthDatabase = Depends(get_store),
    spf_resolver: SPFIncludeResolver = Depends(get_spf_resolver)
):
    """
    Expand the sender's SPF include and store the resulting ranges.

    Fails with 400 when nothing could be resolved; partial results are saved
    together with their errors in the response.
    """
    sender = db.get_owned_sender(org_id, sender_id)
    if not sender.spf_include:
        raise InvalidInputError("Known sender has no SPF include configured")

    result = await spf_resolver.resolve(sender.spf_include)
    if not result.ip_ranges and result.errors:
        raise InvalidInputError(result.errors[0])

    updated = db.set_sender_ip_ranges(
        org_id, sender_id, result.ip_ranges, datetime.now(timezone.utc)
    )
    return ResolveSPFResponse(sender=updated, resolved=result)


@router.post("/spf/classify", response_model=SPFMatchesResponse)
async def classify_spf(
    org_id: str,
    request: ClassifyRequest,
    db: MailAuthDatabase = Depends(get_store)
):
    """Classify every include/ip4/ip6 mechanism of an SPF record."""
    senders = db.list_visible_senders(org_id)
    return SPFMatchesResponse(matches=classify_spf_record(request.spf_record, senders))
