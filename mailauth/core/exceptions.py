"""
Exception hierarchy for the mail authentication core.

Soft misses (no record published) are never surfaced to callers as errors;
``RecordNotFound`` only travels between the DNS client and the code that turns
it into ``found=False``.
"""
from typing import Optional


class MailAuthError(Exception):
    """Base class for all errors raised by the core."""


class InvalidInputError(MailAuthError):
    """Malformed domain, selector or lookup request. Raised before any DNS query."""


class RecordNotFound(MailAuthError):
    """NXDOMAIN or NODATA for a TXT query."""

    def __init__(self, name: str):
        super().__init__(f"No TXT records at {name}")
        self.name = name


class DNSLookupError(MailAuthError):
    """Hard DNS failure: timeout, no reachable nameservers, malformed answer."""

    def __init__(self, name: str, reason: Optional[str] = None):
        self.name = name
        self.reason = reason or "DNS lookup failed"
        super().__init__(f"DNS lookup for {name} failed: {self.reason}")


class VerificationError(MailAuthError):
    """Domain ownership could not be verified, or verification is not applicable."""


class NotFoundError(MailAuthError):
    """Requested domain or known sender does not exist in the caller's scope."""


class PermissionDeniedError(MailAuthError):
    """Write attempted against a catalog entry the organization does not own."""


class DuplicateDomainError(MailAuthError):
    """Domain already registered for the organization."""
