"""
Lookup of SPF, DMARC and DKIM TXT records.

A lookup request is a closed ``LookupKind`` plus an optional selector that must
be present for DKIM and absent otherwise. Inconsistent requests are rejected
with ``InvalidInputError`` before any query is sent.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from mailauth.core.dns_client import TXTResolver
from mailauth.core.exceptions import InvalidInputError, RecordNotFound
from mailauth.core.record_parser import parse_spf_record
from mailauth.core.validation import validate_domain, validate_selector
from mailauth.models.dns import RecordLookupResult

logger = logging.getLogger(__name__)

DKIM_LABEL = "_domainkey"


def is_spf_record(record: str) -> bool:
    """``v=spf1`` as the first term, in any case."""
    return parse_spf_record(record) is not None


def is_dmarc_record(record: str) -> bool:
    return record.startswith("v=DMARC1")


def is_dkim_record(record: str) -> bool:
    return record.startswith("v=DKIM1") or "k=rsa" in record or "p=" in record


class LookupKind(str, Enum):
    """Authentication record types that can be looked up."""
    DMARC = "dmarc"
    SPF = "spf"
    DKIM = "dkim"

    @classmethod
    def parse(cls, value: Optional[str]) -> "LookupKind":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise InvalidInputError("Invalid type. Must be dmarc, spf, or dkim") from None


_MATCHERS = {
    LookupKind.DMARC: is_dmarc_record,
    LookupKind.SPF: is_spf_record,
    LookupKind.DKIM: is_dkim_record,
}


def dkim_host(selector: str, domain: str) -> str:
    """Build ``<selector>._domainkey.<domain>``.

    Selectors already written as ``<selector>._domainkey`` are not suffixed twice.
    """
    if selector.lower().endswith("." + DKIM_LABEL):
        return f"{selector}.{domain}"
    return f"{selector}.{DKIM_LABEL}.{domain}"


@dataclass(frozen=True)
class LookupQuery:
    """A validated lookup request."""
    domain: str
    kind: LookupKind
    selector: Optional[str] = None

    @classmethod
    def build(cls, domain: str, kind, selector: Optional[str] = None) -> "LookupQuery":
        """Validate raw request values.

        Args:
            domain: Domain to inspect
            kind: ``LookupKind`` or its string value
            selector: DKIM selector; required for DKIM, rejected otherwise

        Returns:
            LookupQuery

        Raises:
            InvalidInputError: on any malformed or inconsistent input
        """
        domain = validate_domain(domain)
        if not isinstance(kind, LookupKind):
            kind = LookupKind.parse(kind)

        if kind is LookupKind.DKIM:
            selector = validate_selector(selector)
        elif selector:
            raise InvalidInputError("Selector is only valid for DKIM lookups")
        else:
            selector = None

        return cls(domain=domain, kind=kind, selector=selector)

    @property
    def host(self) -> str:
        if self.kind is LookupKind.DMARC:
            return f"_dmarc.{self.domain}"
        if self.kind is LookupKind.DKIM:
            return dkim_host(self.selector, self.domain)
        return self.domain

    def matches(self, record: str) -> bool:
        return _MATCHERS[self.kind](record)


async def fetch_txt(resolver: TXTResolver, host: str) -> List[str]:
    """TXT strings at *host*; an empty list when nothing is published.

    Hard failures propagate as ``DNSLookupError``.
    """
    try:
        return await resolver.resolve_txt(host)
    except RecordNotFound:
        return []


async def fetch_matching(resolver: TXTResolver, host: str,
                         matcher: Callable[[str], bool]) -> RecordLookupResult:
    """Look up *host* and pick the first record accepted by *matcher*."""
    records = await fetch_txt(resolver, host)
    record = next((r for r in records if matcher(r)), None)
    return RecordLookupResult(
        domain=host,
        record=record,
        all_records=records,
        found=record is not None,
    )


async def lookup_record(resolver: TXTResolver, query: LookupQuery) -> RecordLookupResult:
    """Run the lookup described by *query*."""
    result = await fetch_matching(resolver, query.host, query.matches)
    logger.debug("%s lookup at %s: found=%s", query.kind.value, result.domain, result.found)
    return result


async def lookup_spf(resolver: TXTResolver, domain: str) -> RecordLookupResult:
    return await fetch_matching(resolver, domain, is_spf_record)


async def lookup_dmarc(resolver: TXTResolver, domain: str) -> RecordLookupResult:
    return await fetch_matching(resolver, f"_dmarc.{domain}", is_dmarc_record)
