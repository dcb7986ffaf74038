"""
Classification of SPF mechanisms and sending sources against known senders.

``senders`` is always the catalog visible to the requesting organization
(global entries plus the organization's own) in catalog order; when several
entries match, the first one wins.
"""
import logging
from typing import Iterable, List, Optional, Sequence

from mailauth.core.cidr import ip_matches_any_range, ip_to_int
from mailauth.core.record_parser import parse_spf_record
from mailauth.models.sender import ClassificationMatch, KnownSender, SenderSummary

logger = logging.getLogger(__name__)

CLASSIFIED_MECHANISMS = ("include", "ip4", "ip6")


def include_matches(include: str, pattern: str) -> bool:
    """Loose match between an include target and a sender's include pattern.

    Either string containing the other counts as a match, case-insensitively,
    so ``_spf.google.com`` matches a ``google.com`` pattern and the other way
    around. This also means a short pattern such as ``mail.com`` matches
    ``hotmail.com``; nothing ranks candidates beyond catalog order.
    """
    include = include.lower()
    pattern = pattern.lower()
    return pattern in include or include in pattern


def match_sender_by_include(include: str,
                            senders: Iterable[KnownSender]) -> Optional[KnownSender]:
    for sender in senders:
        if sender.spf_include and include_matches(include, sender.spf_include):
            return sender
    return None


def match_sender_by_ip(ip: str, senders: Iterable[KnownSender]) -> Optional[KnownSender]:
    """First sender with a range containing *ip*; IPv6 never matches."""
    if ip_to_int(ip) is None:
        return None
    for sender in senders:
        if sender.ip_ranges and ip_matches_any_range(ip, sender.ip_ranges):
            return sender
    return None


def dkim_domain_matches(dkim_domain: str, known_domains: Iterable[str]) -> bool:
    """Exact or subdomain match, e.g. ``mail.google.com`` against ``google.com``."""
    normalized = dkim_domain.lower().rstrip(".")
    for known in known_domains:
        known = known.lower().rstrip(".")
        if normalized == known or normalized.endswith("." + known):
            return True
    return False


def match_sender_by_dkim_domain(dkim_domain: str,
                                senders: Iterable[KnownSender]) -> Optional[KnownSender]:
    for sender in senders:
        if sender.dkim_domains and dkim_domain_matches(dkim_domain, sender.dkim_domains):
            return sender
    return None


def _summary(sender: Optional[KnownSender]) -> Optional[SenderSummary]:
    return SenderSummary.from_sender(sender) if sender else None


def classify_spf_record(spf_record: Optional[str],
                        senders: Sequence[KnownSender]) -> List[ClassificationMatch]:
    """One match per include/ip4/ip6 mechanism, in record order.

    Include targets are reported lowercased. ip4 values keep their prefix but
    only the base address is tested against sender ranges. ip6 mechanisms are
    listed without a sender.
    """
    parsed = parse_spf_record(spf_record)
    if parsed is None:
        return []

    matches = []
    for mechanism in parsed.mechanisms:
        if mechanism.name not in CLASSIFIED_MECHANISMS or not mechanism.value:
            continue

        if mechanism.name == "include":
            value = mechanism.value.lower()
            sender = match_sender_by_include(value, senders)
        elif mechanism.name == "ip4":
            value = mechanism.value
            sender = match_sender_by_ip(value.split("/", 1)[0], senders)
        else:
            value = mechanism.value
            sender = None

        matches.append(ClassificationMatch(type=mechanism.name, value=value,
                                           sender=_summary(sender)))

    logger.debug("Classified %d SPF mechanisms, %d matched",
                 len(matches), sum(1 for m in matches if m.sender))
    return matches


def match_source(ip: Optional[str], dkim_domains: Sequence[str],
                 senders: Sequence[KnownSender]):
    """Identify the sender behind an observed source.

    The IP is tried first, then each DKIM signing domain in order.

    Returns:
        Tuple of (sender, matched_by) where matched_by is "ip", "dkim" or None
    """
    if ip:
        sender = match_sender_by_ip(ip, senders)
        if sender:
            return sender, "ip"

    for domain in dkim_domains:
        sender = match_sender_by_dkim_domain(domain, senders)
        if sender:
            return sender, "dkim"

    return None, None
