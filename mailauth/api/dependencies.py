"""
Dependency injection for API endpoints.
Provides singleton instances of the resolver and the store, and builds the
per-request services on top of them.
"""
from functools import lru_cache

from fastapi import Depends, Header

from config.settings import settings
from mailauth.core.dkim_probe import SelectorProber
from mailauth.core.dns_client import DNSPythonResolver, TXTResolver
from mailauth.core.spf_resolver import SPFIncludeResolver
from mailauth.core.verification import DomainVerifier
from mailauth.database.store import MailAuthDatabase


@lru_cache()
def get_resolver() -> TXTResolver:
    """
    Get or create the DNS resolver instance.

    Returns:
        Singleton DNSPythonResolver configured from settings
    """
    return DNSPythonResolver(
        timeout=settings.dns_timeout,
        nameservers=settings.dns_nameservers
    )


@lru_cache()
def get_store() -> MailAuthDatabase:
    """
    Get or create the database instance.

    Returns:
        Singleton MailAuthDatabase instance
    """
    return MailAuthDatabase(db_path=settings.database_path)


def get_prober(resolver: TXTResolver = Depends(get_resolver)) -> SelectorProber:
    return SelectorProber(resolver, probe_limit=settings.dkim_probe_limit)


def get_spf_resolver(resolver: TXTResolver = Depends(get_resolver)) -> SPFIncludeResolver:
    return SPFIncludeResolver(
        resolver,
        max_depth=settings.spf_max_depth,
        max_lookups=settings.spf_max_lookups,
        max_ranges=settings.spf_max_ranges
    )


def get_verifier(
    db: MailAuthDatabase = Depends(get_store),
    resolver: TXTResolver = Depends(get_resolver)
) -> DomainVerifier:
    return DomainVerifier(db, resolver)


def get_actor_id(x_actor_id: str = Header(...)) -> str:
    """Identity of the user acting on behalf of the organization."""
    return x_actor_id
