"""Core business logic for the application."""
from .dns_client import TXTResolver, DNSPythonResolver
from .dkim_probe import SelectorProber
from .spf_resolver import SPFIncludeResolver

__all__ = [
    "TXTResolver",
    "DNSPythonResolver",
    "SelectorProber",
    "SPFIncludeResolver"
]
