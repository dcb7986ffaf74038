"""
Domain ownership verification via DNS TXT records.

The owner publishes the domain's verification token as a TXT record at
``_dmarc-verify.<domain>``; verification succeeds when one of the returned
strings equals the token exactly.
"""
import logging
import secrets
from datetime import datetime, timezone

from mailauth.core.dns_client import TXTResolver
from mailauth.core.exceptions import DNSLookupError, VerificationError
from mailauth.core.record_lookup import fetch_txt, lookup_dmarc
from mailauth.database.store import MailAuthDatabase
from mailauth.models.domain import DomainRecord, VerificationInstructions

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "dmarc-verify="
VERIFY_LABEL = "_dmarc-verify"


def generate_verification_token() -> str:
    """Generate a random verification token.

    Returns:
        Verification token string (e.g., "dmarc-verify=1a2b3c...")
    """
    return f"{TOKEN_PREFIX}{secrets.token_hex(16)}"


def verification_host(domain: str) -> str:
    return f"{VERIFY_LABEL}.{domain}"


def verification_instructions(domain: DomainRecord) -> VerificationInstructions:
    """TXT record the owner has to publish for *domain*."""
    return VerificationInstructions(
        txt_name=verification_host(domain.domain),
        txt_value=domain.verification_token or "",
    )


class DomainVerifier:
    """Checks published verification tokens and records the result."""

    def __init__(self, db: MailAuthDatabase, resolver: TXTResolver):
        """Initialize domain verifier.

        Args:
            db: Store that holds the domain records
            resolver: TXT resolver used for the token lookup
        """
        self.db = db
        self.resolver = resolver

    async def verify(self, domain: DomainRecord, actor_id: str) -> DomainRecord:
        """Verify ownership of *domain* on behalf of *actor_id*.

        Returns:
            The updated DomainRecord

        Raises:
            VerificationError: already verified, no token, or token not published
            DNSLookupError: the TXT lookup failed hard
        """
        if domain.is_verified:
            raise VerificationError("Domain is already verified")
        if not domain.verification_token:
            raise VerificationError("No verification token found")

        host = verification_host(domain.domain)
        records = await fetch_txt(self.resolver, host)

        if domain.verification_token not in records:
            found = ", ".join(records) if records else "no records"
            logger.info("Verification of %s failed: token not published", domain.domain)
            raise VerificationError(
                f'Verification failed. Expected TXT record "{domain.verification_token}" '
                f"at {host} but found: {found}"
            )

        now = datetime.now(timezone.utc)
        if not self.db.mark_domain_verified(domain.id, now, actor_id):
            # Verified concurrently by another request; keep the first result.
            raise VerificationError("Domain is already verified")
        logger.info("Domain %s verified by %s", domain.domain, actor_id)

        await self._cache_dmarc(domain)
        return self.db.get_domain(domain.organization_id, domain.id)

    async def _cache_dmarc(self, domain: DomainRecord):
        try:
            dmarc = await lookup_dmarc(self.resolver, domain.domain)
        except DNSLookupError as exc:
            logger.warning("DMARC fetch after verifying %s failed: %s", domain.domain, exc)
            return
        self.db.update_domain_dns(
            domain.id, datetime.now(timezone.utc), dmarc_record=dmarc.record
        )
