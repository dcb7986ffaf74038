"""
Ad-hoc DNS lookup and record validation endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mailauth.api.dependencies import get_resolver
from mailauth.core.dns_client import TXTResolver
from mailauth.core.record_lookup import LookupKind, LookupQuery, lookup_record
from mailauth.core.record_parser import VALIDATORS, get_recommendations
from mailauth.models.dns import (
    RecordLookupResult,
    RecordValidationRequest,
    RecordValidationResult,
)

router = APIRouter(prefix="/api/dns", tags=["dns"])


@router.get("/lookup", response_model=RecordLookupResult)
async def lookup(
    domain: str = Query(...),
    type: str = Query("dmarc"),
    selector: Optional[str] = Query(None),
    resolver: TXTResolver = Depends(get_resolver)
):
    """
    Look up the DMARC, SPF or DKIM record of a domain.

    Args:
        domain: Domain to inspect
        type: dmarc, spf or dkim
        selector: DKIM selector (DKIM only)

    Returns:
        Queried host, first matching record and every TXT string found
    """
    query = LookupQuery.build(domain, type, selector)
    return await lookup_record(resolver, query)


@router.post("/validate", response_model=RecordValidationResult)
async def validate(request: RecordValidationRequest):
    """Report issues and recommendations for a DMARC, SPF or DKIM record."""
    kind = LookupKind.parse(request.type)
    record = (request.record or "").strip() or None

    issues = VALIDATORS[kind.value](record) if record else []

    return RecordValidationResult(
        type=kind.value,
        record=record,
        issues=issues,
        recommendations=get_recommendations(kind.value, record)
    )
