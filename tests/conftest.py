"""Shared fixtures: a scripted TXT resolver and a throwaway database."""
from typing import Dict, List, Optional

import pytest

from mailauth.core.dns_client import TXTResolver
from mailauth.core.exceptions import DNSLookupError, RecordNotFound
from mailauth.database.store import MailAuthDatabase


class FakeResolver(TXTResolver):
    """TXT resolver answering from a dict.

    Names missing from ``records`` (or mapped to an empty list) behave like
    NXDOMAIN; names in ``failures`` raise ``DNSLookupError`` with that reason.
    Every queried name is appended to ``queries``.
    """

    def __init__(self, records: Optional[Dict[str, List[str]]] = None,
                 failures: Optional[Dict[str, str]] = None):
        self.records = dict(records or {})
        self.failures = dict(failures or {})
        self.queries: List[str] = []

    async def resolve_txt(self, name: str) -> List[str]:
        self.queries.append(name)
        if name in self.failures:
            raise DNSLookupError(name, self.failures[name])
        records = self.records.get(name)
        if not records:
            raise RecordNotFound(name)
        return list(records)


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def db(tmp_path):
    return MailAuthDatabase(db_path=str(tmp_path / "mailauth.db"))


@pytest.fixture
def make_sender(db):
    """Create senders directly in the store.

    ``org_id=None`` creates a global sender.
    """
    def _make(name, org_id=None, **fields):
        data = {"name": name, "category": fields.pop("category", "transactional")}
        data.update(fields)
        if org_id is None:
            db.seed_global_senders([data])
            return next(s for s in db.list_visible_senders("any-org")
                        if s.name == name and s.is_global)
        return db.create_org_sender(org_id, data)

    return _make
