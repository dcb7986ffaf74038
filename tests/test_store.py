"""Tests for mailauth/database/store.py."""
from datetime import datetime, timezone

import pytest

from mailauth.core.exceptions import DuplicateDomainError, NotFoundError, PermissionDeniedError
from mailauth.database.seeds import GLOBAL_KNOWN_SENDERS
from mailauth.database.store import MailAuthDatabase


def test_domain_lifecycle(db):
    domain = db.create_domain("org-1", "example.com", "dmarc-verify=abc")

    assert domain.organization_id == "org-1"
    assert domain.verification_token == "dmarc-verify=abc"
    assert domain.is_verified is False
    assert db.get_domain("org-2", domain.id) is None
    assert [d.id for d in db.list_domains("org-1")] == [domain.id]
    assert db.list_domains("org-2") == []


def test_domain_unique_per_organization(db):
    db.create_domain("org-1", "example.com", "dmarc-verify=abc")
    with pytest.raises(DuplicateDomainError):
        db.create_domain("org-1", "example.com", "dmarc-verify=def")
    db.create_domain("org-2", "example.com", "dmarc-verify=ghi")


def test_verified_at_is_never_overwritten(db):
    domain = db.create_domain("org-1", "example.com", "dmarc-verify=abc")
    first = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert db.mark_domain_verified(domain.id, first, "user-1") is True
    assert db.mark_domain_verified(domain.id, datetime.now(timezone.utc), "user-2") is False

    stored = db.get_domain("org-1", domain.id)
    assert stored.verified_at == first
    assert stored.verified_by == "user-1"


def test_update_domain_dns_only_touches_given_records(db):
    domain = db.create_domain("org-1", "example.com", "dmarc-verify=abc")
    checked = datetime(2024, 2, 1, tzinfo=timezone.utc)

    db.update_domain_dns(domain.id, checked, spf_record="v=spf1 -all", dmarc_record="v=DMARC1; p=none")
    db.update_domain_dns(domain.id, checked, dmarc_record=None)

    stored = db.get_domain("org-1", domain.id)
    assert stored.spf_record == "v=spf1 -all"
    assert stored.dmarc_record is None
    assert stored.last_dns_check == checked


def test_visible_senders_are_global_plus_own(db, make_sender):
    make_sender("Zeta Global")
    make_sender("Alpha Mine", org_id="org-1")
    make_sender("Beta Theirs", org_id="org-2")

    names = [s.name for s in db.list_visible_senders("org-1")]
    assert names == ["Alpha Mine", "Zeta Global"]


def test_other_organizations_senders_are_invisible(db, make_sender):
    theirs = make_sender("Theirs", org_id="org-2")
    with pytest.raises(NotFoundError):
        db.get_visible_sender("org-1", theirs.id)
    with pytest.raises(NotFoundError):
        db.update_org_sender("org-1", theirs.id, {"name": "Mine now"})
    with pytest.raises(NotFoundError):
        db.delete_org_sender("org-1", theirs.id)


def test_global_senders_are_read_only(db, make_sender):
    glob = make_sender("Global", spf_include="global.example")

    assert db.get_visible_sender("org-1", glob.id).id == glob.id
    with pytest.raises(PermissionDeniedError):
        db.update_org_sender("org-1", glob.id, {"name": "Hijacked"})
    with pytest.raises(PermissionDeniedError):
        db.delete_org_sender("org-1", glob.id)
    with pytest.raises(PermissionDeniedError):
        db.set_sender_ip_ranges("org-1", glob.id, ["10.0.0.0/8"], datetime.now(timezone.utc))

    assert db.get_sender(glob.id).name == "Global"


def test_org_sender_update_and_delete(db, make_sender):
    mine = make_sender("Mine", org_id="org-1", ip_ranges=["192.0.2.0/24"])

    updated = db.update_org_sender("org-1", mine.id, {"description": "ours", "dkim_domains": ["mine.example"]})
    assert updated.description == "ours"
    assert updated.dkim_domains == ["mine.example"]
    assert updated.ip_ranges == ["192.0.2.0/24"]

    resolved_at = datetime(2024, 3, 1, tzinfo=timezone.utc)
    refreshed = db.set_sender_ip_ranges("org-1", mine.id, ["198.51.100.0/24"], resolved_at)
    assert refreshed.ip_ranges == ["198.51.100.0/24"]
    assert refreshed.spf_resolved_at == resolved_at

    db.delete_org_sender("org-1", mine.id)
    assert db.get_sender(mine.id) is None


def test_seeding_is_idempotent(tmp_path):
    db = MailAuthDatabase(db_path=str(tmp_path / "seed.db"))

    assert db.seed_global_senders(GLOBAL_KNOWN_SENDERS) == len(GLOBAL_KNOWN_SENDERS)
    assert db.seed_global_senders(GLOBAL_KNOWN_SENDERS) == 0
    assert db.count_global_senders() == len(GLOBAL_KNOWN_SENDERS)

    sendgrid = next(s for s in db.list_visible_senders("org-1") if s.name == "SendGrid")
    assert sendgrid.is_global is True
    assert sendgrid.organization_id is None
    assert "167.89.0.0/17" in sendgrid.ip_ranges


def test_seed_names_are_unique():
    names = [entry["name"] for entry in GLOBAL_KNOWN_SENDERS]
    assert len(names) == len(set(names))
