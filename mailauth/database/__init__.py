"""Persistence for domains and the known-sender catalog."""
from .store import MailAuthDatabase
from .seeds import GLOBAL_KNOWN_SENDERS

__all__ = [
    "MailAuthDatabase",
    "GLOBAL_KNOWN_SENDERS"
]
