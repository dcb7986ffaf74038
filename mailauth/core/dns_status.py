"""
Combined SPF/DKIM/DMARC status of a domain.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable

from mailauth.core.dkim_probe import SelectorProber
from mailauth.core.dns_client import TXTResolver
from mailauth.core.exceptions import DNSLookupError
from mailauth.core.record_lookup import lookup_dmarc, lookup_spf
from mailauth.core.validation import validate_domain
from mailauth.database.store import MailAuthDatabase
from mailauth.models.dns import (
    DNSRefreshResult,
    DomainDNSStatus,
    RecordChange,
    RecordLookupResult,
    RecordStatus,
)
from mailauth.models.domain import DomainRecord

logger = logging.getLogger(__name__)


async def _record_status(lookup: Awaitable[RecordLookupResult]) -> RecordStatus:
    try:
        result = await lookup
    except DNSLookupError as exc:
        logger.warning("%s", exc)
        return RecordStatus(valid=False, error=exc.reason)
    return RecordStatus(valid=result.found, record=result.record)


async def check_dns_status(resolver: TXTResolver, domain: str,
                           prober: SelectorProber) -> DomainDNSStatus:
    """Look up SPF and DMARC and probe DKIM selectors concurrently.

    A hard failure of one lookup is reported in that record's ``error`` and does
    not affect the others.
    """
    domain = validate_domain(domain)
    spf, dmarc, dkim = await asyncio.gather(
        _record_status(lookup_spf(resolver, domain)),
        _record_status(lookup_dmarc(resolver, domain)),
        prober.probe(domain),
    )
    return DomainDNSStatus(domain=domain, spf=spf, dkim=dkim, dmarc=dmarc)


def _change(fresh: RecordLookupResult, previous) -> RecordChange:
    return RecordChange(
        record=fresh.record,
        valid=fresh.found,
        changed=fresh.record != previous,
        previous=previous,
    )


async def refresh_domain_records(db: MailAuthDatabase, resolver: TXTResolver,
                                 domain: DomainRecord) -> DNSRefreshResult:
    """Re-fetch SPF and DMARC, cache them and report what changed.

    Raises:
        DNSLookupError: if either lookup fails hard; nothing is cached then
    """
    spf, dmarc = await asyncio.gather(
        lookup_spf(resolver, domain.domain),
        lookup_dmarc(resolver, domain.domain),
    )
    checked_at = datetime.now(timezone.utc)
    db.update_domain_dns(
        domain.id, checked_at, spf_record=spf.record, dmarc_record=dmarc.record
    )

    result = DNSRefreshResult(
        domain=domain.domain,
        spf=_change(spf, domain.spf_record),
        dmarc=_change(dmarc, domain.dmarc_record),
        last_checked=checked_at,
    )
    if result.spf.changed or result.dmarc.changed:
        logger.info("DNS records changed for %s (spf=%s, dmarc=%s)",
                    domain.domain, result.spf.changed, result.dmarc.changed)
    return result
