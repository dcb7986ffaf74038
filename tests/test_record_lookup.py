"""Tests for mailauth/core/record_lookup.py."""
import pytest

from mailauth.core.exceptions import DNSLookupError, InvalidInputError
from mailauth.core.record_lookup import (
    LookupKind,
    LookupQuery,
    dkim_host,
    is_dkim_record,
    lookup_dmarc,
    lookup_record,
    lookup_spf,
)
from tests.conftest import FakeResolver


@pytest.mark.asyncio
async def test_missing_dmarc_is_not_an_error(resolver):
    query = LookupQuery.build("example.com", "dmarc")
    result = await lookup_record(resolver, query)

    assert result.domain == "_dmarc.example.com"
    assert result.record is None
    assert result.found is False
    assert result.all_records == []
    assert resolver.queries == ["_dmarc.example.com"]


@pytest.mark.asyncio
async def test_spf_picks_matching_record():
    resolver = FakeResolver({
        "example.com": ["google-site-verification=abc", "v=spf1 include:_spf.google.com ~all"],
    })
    result = await lookup_spf(resolver, "example.com")

    assert result.found is True
    assert result.record == "v=spf1 include:_spf.google.com ~all"
    assert result.all_records == ["google-site-verification=abc", "v=spf1 include:_spf.google.com ~all"]


@pytest.mark.asyncio
async def test_records_present_but_none_match():
    resolver = FakeResolver({"_dmarc.example.com": ["hello world"]})
    result = await lookup_dmarc(resolver, "example.com")

    assert result.found is False
    assert result.record is None
    assert result.all_records == ["hello world"]


@pytest.mark.asyncio
async def test_dkim_lookup_uses_selector_host():
    resolver = FakeResolver({"google._domainkey.example.com": ["v=DKIM1; k=rsa; p=MIIB"]})
    result = await lookup_record(resolver, LookupQuery.build("Example.COM", "DKIM", "google"))

    assert result.domain == "google._domainkey.example.com"
    assert result.found is True


@pytest.mark.asyncio
async def test_hard_failure_propagates():
    resolver = FakeResolver(failures={"_dmarc.example.com": "timeout"})
    with pytest.raises(DNSLookupError) as exc_info:
        await lookup_record(resolver, LookupQuery.build("example.com", LookupKind.DMARC))
    assert exc_info.value.reason == "timeout"


@pytest.mark.parametrize("domain, kind, selector, message", [
    ("", "dmarc", None, "Domain is required"),
    ("not a domain", "dmarc", None, "Invalid domain format"),
    ("example", "spf", None, "Invalid domain format"),
    ("example.com", "mx", None, "Invalid type. Must be dmarc, spf, or dkim"),
    ("example.com", "dkim", None, "Selector is required for DKIM lookups"),
    ("example.com", "dkim", "bad selector!", "Invalid DKIM selector format"),
    ("example.com", "spf", "google", "Selector is only valid for DKIM lookups"),
])
def test_invalid_queries_are_rejected(domain, kind, selector, message):
    with pytest.raises(InvalidInputError) as exc_info:
        LookupQuery.build(domain, kind, selector)
    assert str(exc_info.value) == message


def test_query_hosts():
    assert LookupQuery.build("example.com", "spf").host == "example.com"
    assert LookupQuery.build("example.com", "dmarc").host == "_dmarc.example.com"
    assert LookupQuery.build("example.com.", "dkim", "s1").host == "s1._domainkey.example.com"


def test_dkim_host_does_not_double_the_label():
    assert dkim_host("google", "example.com") == "google._domainkey.example.com"
    assert dkim_host("google._domainkey", "example.com") == "google._domainkey.example.com"


@pytest.mark.parametrize("record, expected", [
    ("v=DKIM1; k=rsa; p=MIIB", True),
    ("k=rsa; p=MIIB", True),
    ("p=MIIB", True),
    ("v=spf1 -all", False),
])
def test_is_dkim_record(record, expected):
    assert is_dkim_record(record) is expected


@pytest.mark.asyncio
async def test_spf_version_tag_is_case_insensitive():
    resolver = FakeResolver({"example.com": ["V=SPF1 ip4:192.0.2.1 -all", "v=spf10 -all"]})
    result = await lookup_spf(resolver, "example.com")

    assert result.found is True
    assert result.record == "V=SPF1 ip4:192.0.2.1 -all"
