"""
TXT resolution with a clear split between "nothing published" and "lookup failed".

Everything above this module talks to a ``TXTResolver``; tests substitute a
scripted implementation and production uses ``DNSPythonResolver``.
"""
import logging
from typing import List, Optional, Sequence

import dns.asyncresolver
import dns.exception
import dns.resolver

from mailauth.core.exceptions import DNSLookupError, RecordNotFound

logger = logging.getLogger(__name__)


class TXTResolver:
    """Interface for asynchronous TXT lookups."""

    async def resolve_txt(self, name: str) -> List[str]:
        """Return one string per TXT record published at *name*.

        Raises:
            RecordNotFound: the name does not exist or has no TXT data
            DNSLookupError: any other failure, including timeouts
        """
        raise NotImplementedError


class DNSPythonResolver(TXTResolver):
    """``TXTResolver`` backed by ``dns.asyncresolver``."""

    def __init__(self, timeout: float = 5.0,
                 nameservers: Optional[Sequence[str]] = None):
        """Initialize resolver.

        Args:
            timeout: Total lifetime of a single query in seconds
            nameservers: Optional explicit nameserver IPs; the system
                configuration is used when omitted
        """
        self.timeout = timeout
        self.nameservers = list(nameservers) if nameservers else None

    def _make_resolver(self) -> dns.asyncresolver.Resolver:
        resolver = dns.asyncresolver.Resolver(configure=self.nameservers is None)
        if self.nameservers is not None:
            resolver.nameservers = self.nameservers
        resolver.lifetime = self.timeout
        return resolver

    async def resolve_txt(self, name: str) -> List[str]:
        resolver = self._make_resolver()
        try:
            answers = await resolver.resolve(name, "TXT")
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer) as exc:
            logger.debug("No TXT records at %s: %s", name, exc)
            raise RecordNotFound(name) from exc
        except dns.exception.Timeout as exc:
            logger.warning("TXT lookup for %s timed out after %.1fs", name, self.timeout)
            raise DNSLookupError(name, "timeout") from exc
        except dns.exception.DNSException as exc:
            logger.warning("TXT lookup for %s failed: %s", name, exc)
            raise DNSLookupError(name, str(exc) or exc.__class__.__name__) from exc

        # Long records arrive as several character-strings; RFC 7208 3.3 says
        # they are concatenated without separators.
        return [
            b"".join(rdata.strings).decode("utf-8", errors="replace")
            for rdata in answers
        ]
