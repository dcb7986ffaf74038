"""Tests for mailauth/core/verification.py."""
import re

import pytest

from mailauth.core.exceptions import DNSLookupError, VerificationError
from mailauth.core.verification import (
    DomainVerifier,
    generate_verification_token,
    verification_instructions,
)
from tests.conftest import FakeResolver

DMARC = "v=DMARC1; p=none; rua=mailto:d@example.com"


def test_token_format():
    token = generate_verification_token()
    assert re.fullmatch(r"dmarc-verify=[0-9a-f]{32}", token)
    assert token != generate_verification_token()


def test_instructions(db):
    domain = db.create_domain("org-1", "example.com", "dmarc-verify=abc")
    instructions = verification_instructions(domain)
    assert instructions.txt_name == "_dmarc-verify.example.com"
    assert instructions.txt_value == "dmarc-verify=abc"


@pytest.mark.asyncio
async def test_round_trip(db):
    token = generate_verification_token()
    domain = db.create_domain("org-1", "example.com", token)
    resolver = FakeResolver({
        "_dmarc-verify.example.com": ["unrelated", token],
        "_dmarc.example.com": [DMARC],
    })
    verifier = DomainVerifier(db, resolver)

    verified = await verifier.verify(domain, "user-1")

    assert verified.is_verified
    assert verified.verified_by == "user-1"
    assert verified.dmarc_record == DMARC
    assert verified.last_dns_check is not None

    resolver.queries.clear()
    with pytest.raises(VerificationError) as exc_info:
        await verifier.verify(verified, "user-2")
    assert str(exc_info.value) == "Domain is already verified"
    assert resolver.queries == []
    assert db.get_domain("org-1", domain.id).verified_by == "user-1"


@pytest.mark.asyncio
async def test_mismatch_message_lists_found_records(db):
    domain = db.create_domain("org-1", "example.com", "dmarc-verify=expected")
    resolver = FakeResolver({"_dmarc-verify.example.com": ["dmarc-verify=stale", "other"]})

    with pytest.raises(VerificationError) as exc_info:
        await DomainVerifier(db, resolver).verify(domain, "user-1")

    assert str(exc_info.value) == (
        'Verification failed. Expected TXT record "dmarc-verify=expected" at '
        "_dmarc-verify.example.com but found: dmarc-verify=stale, other"
    )
    assert not db.get_domain("org-1", domain.id).is_verified


@pytest.mark.asyncio
async def test_no_records_published(db):
    domain = db.create_domain("org-1", "example.com", "dmarc-verify=expected")

    with pytest.raises(VerificationError) as exc_info:
        await DomainVerifier(db, FakeResolver()).verify(domain, "user-1")

    assert str(exc_info.value).endswith("but found: no records")


@pytest.mark.asyncio
async def test_token_must_match_exactly(db):
    domain = db.create_domain("org-1", "example.com", "dmarc-verify=abc")
    resolver = FakeResolver({"_dmarc-verify.example.com": ["dmarc-verify=abcd", " dmarc-verify=abc"]})

    with pytest.raises(VerificationError):
        await DomainVerifier(db, resolver).verify(domain, "user-1")


@pytest.mark.asyncio
async def test_missing_token(db):
    domain = db.create_domain("org-1", "example.com", "")
    resolver = FakeResolver()

    with pytest.raises(VerificationError) as exc_info:
        await DomainVerifier(db, resolver).verify(domain, "user-1")
    assert str(exc_info.value) == "No verification token found"
    assert resolver.queries == []


@pytest.mark.asyncio
async def test_dns_failure_propagates(db):
    domain = db.create_domain("org-1", "example.com", "dmarc-verify=abc")
    resolver = FakeResolver(failures={"_dmarc-verify.example.com": "timeout"})

    with pytest.raises(DNSLookupError):
        await DomainVerifier(db, resolver).verify(domain, "user-1")
    assert not db.get_domain("org-1", domain.id).is_verified


@pytest.mark.asyncio
async def test_dmarc_failure_after_success_is_ignored(db):
    domain = db.create_domain("org-1", "example.com", "dmarc-verify=abc")
    resolver = FakeResolver(
        {"_dmarc-verify.example.com": ["dmarc-verify=abc"]},
        failures={"_dmarc.example.com": "timeout"},
    )

    verified = await DomainVerifier(db, resolver).verify(domain, "user-1")

    assert verified.is_verified
    assert verified.dmarc_record is None


@pytest.mark.asyncio
async def test_concurrent_verification_keeps_first_result(db):
    domain = db.create_domain("org-1", "example.com", "dmarc-verify=abc")
    resolver = FakeResolver({"_dmarc-verify.example.com": ["dmarc-verify=abc"]})
    verifier = DomainVerifier(db, resolver)

    await verifier.verify(domain, "user-1")
    # Same stale snapshot as a request that read the row before the first one finished.
    with pytest.raises(VerificationError):
        await verifier.verify(domain, "user-2")
    assert db.get_domain("org-1", domain.id).verified_by == "user-1"
