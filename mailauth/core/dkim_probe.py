"""
DKIM selector discovery.

A domain's selectors cannot be enumerated through DNS, so well-known provider
selectors are probed directly. Only a short prefix of the table is probed per
status request to bound the query fan-out.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from mailauth.core.dns_client import TXTResolver
from mailauth.core.exceptions import MailAuthError
from mailauth.core.record_lookup import dkim_host, fetch_txt, is_dkim_record
from mailauth.models.dns import DKIMInspection, DKIMSelectorRecord, DKIMStatus

logger = logging.getLogger(__name__)

# Ordered by how often the selector shows up in the wild.
KNOWN_SELECTORS = [
    "google._domainkey",  # Google Workspace
    "selector1._domainkey",  # Microsoft 365
    "selector2._domainkey",  # Microsoft 365
    "default._domainkey",
    "dkim._domainkey",
    "mail._domainkey",
    "s1._domainkey",  # SendGrid
    "s2._domainkey",  # SendGrid
    "k1._domainkey",  # Mailchimp
    "k2._domainkey",  # Mailchimp
    "k3._domainkey",  # Mailchimp
    "mta._domainkey",
    "smtp._domainkey",
    "email._domainkey",
    "mx._domainkey",
    "pm._domainkey",  # Postmark
    "zoho._domainkey",
    "mailjet._domainkey",
    "amazonses._domainkey",
    "mailgun._domainkey",
    "sendgrid._domainkey",
    "postmark._domainkey",
]

DEFAULT_PROBE_LIMIT = 8


class SelectorProber:
    """Concurrent TXT probes against candidate DKIM selectors."""

    def __init__(self, resolver: TXTResolver, probe_limit: int = DEFAULT_PROBE_LIMIT,
                 selectors: Optional[Sequence[str]] = None):
        self.resolver = resolver
        self.probe_limit = probe_limit
        self.selectors = list(selectors) if selectors is not None else list(KNOWN_SELECTORS)

    async def _probe_one(self, domain: str, selector: str) -> Optional[str]:
        """Key record published for *selector*, or None on miss or failure."""
        host = dkim_host(selector, domain)
        try:
            records = await fetch_txt(self.resolver, host)
        except MailAuthError as exc:
            logger.debug("DKIM probe %s failed: %s", host, exc)
            return None
        return next((r for r in records if is_dkim_record(r)), None)

    async def probe(self, domain: str,
                    candidates: Optional[Sequence[str]] = None) -> DKIMStatus:
        """Probe the first ``probe_limit`` candidates and report the hits.

        Args:
            domain: Validated domain name
            candidates: Selector labels to try; defaults to the known table

        Returns:
            DKIMStatus with hits in candidate order
        """
        if candidates is None:
            candidates = self.selectors
        batch = list(candidates)[:self.probe_limit]

        records = await asyncio.gather(*(self._probe_one(domain, s) for s in batch))
        found = [selector for selector, record in zip(batch, records) if record]

        logger.debug("DKIM probe for %s: %d/%d selectors found", domain, len(found), len(batch))
        return DKIMStatus(valid=len(found) > 0, selectors=found)

    async def inspect(self, domain: str) -> DKIMInspection:
        """Probe the whole selector table and return each record."""
        records = await asyncio.gather(*(self._probe_one(domain, s) for s in self.selectors))
        return DKIMInspection(
            domain=domain,
            selectors=[
                DKIMSelectorRecord(selector=selector, record=record, valid=record is not None)
                for selector, record in zip(self.selectors, records)
            ],
            checked_at=datetime.now(timezone.utc),
        )
