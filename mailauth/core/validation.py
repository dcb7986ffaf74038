"""Input validation applied before any DNS query is issued."""
import re

from mailauth.core.exceptions import InvalidInputError

DOMAIN_RE = re.compile(
    r"^[a-zA-Z0-9][a-zA-Z0-9-]*(\.[a-zA-Z0-9][a-zA-Z0-9-]*)*\.[a-zA-Z]{2,}$"
)

# DKIM selectors and SPF include targets routinely carry underscore labels
# (e.g. "_spf.google.com"), which are not legal in a registrable domain.
SELECTOR_RE = re.compile(r"^[a-zA-Z0-9_][a-zA-Z0-9_-]*(\.[a-zA-Z0-9_][a-zA-Z0-9_-]*)*$")
HOSTNAME_RE = re.compile(
    r"^[a-zA-Z0-9_][a-zA-Z0-9_-]*(\.[a-zA-Z0-9_][a-zA-Z0-9_-]*)*\.[a-zA-Z]{2,}$"
)

MAX_HOSTNAME_LENGTH = 253


def normalize_domain(domain: str) -> str:
    """Lowercase, strip whitespace and a trailing root dot."""
    return (domain or "").strip().rstrip(".").lower()


def validate_domain(domain: str) -> str:
    """Return the normalized domain or raise ``InvalidInputError``."""
    normalized = normalize_domain(domain)
    if not normalized:
        raise InvalidInputError("Domain is required")
    if len(normalized) > MAX_HOSTNAME_LENGTH or not DOMAIN_RE.match(normalized):
        raise InvalidInputError("Invalid domain format")
    return normalized


def validate_selector(selector: str) -> str:
    """Return the stripped DKIM selector or raise ``InvalidInputError``."""
    value = (selector or "").strip()
    if not value:
        raise InvalidInputError("Selector is required for DKIM lookups")
    if not SELECTOR_RE.match(value):
        raise InvalidInputError("Invalid DKIM selector format")
    return value


def validate_hostname(hostname: str) -> str:
    """Validate an SPF include target. Underscore labels are accepted."""
    normalized = normalize_domain(hostname)
    if not normalized:
        raise InvalidInputError("No domain provided")
    if len(normalized) > MAX_HOSTNAME_LENGTH or not HOSTNAME_RE.match(normalized):
        raise InvalidInputError(f"Invalid SPF include domain: {hostname}")
    return normalized
