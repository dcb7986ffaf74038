"""Tests for mailauth/core/spf_resolver.py."""
import pytest

from mailauth.core.exceptions import InvalidInputError
from mailauth.core.spf_resolver import SPFIncludeResolver, normalize_include, resolve_spf_include
from tests.conftest import FakeResolver


@pytest.mark.asyncio
async def test_nested_includes_are_flattened():
    resolver = FakeResolver({
        "_spf.example.com": [
            "v=spf1 ip4:192.0.2.0/24 ip4:198.51.100.7 ip6:2001:db8::/32 "
            "include:_netblocks.example.com ~all"
        ],
        "_netblocks.example.com": ["v=spf1 ip4:203.0.113.0/25 ip6:2001:db8:1::1 -all"],
    })
    result = await resolve_spf_include(resolver, "include:_spf.example.com")

    assert result.ip_ranges == [
        "192.0.2.0/24",
        "198.51.100.7/32",
        "2001:db8::/32",
        "203.0.113.0/25",
        "2001:db8:1::1/128",
    ]
    assert result.includes == ["_netblocks.example.com"]
    assert result.errors == []


@pytest.mark.asyncio
async def test_include_cycle_terminates_with_error():
    resolver = FakeResolver({
        "a.example.com": ["v=spf1 ip4:192.0.2.1 include:b.example.com -all"],
        "b.example.com": ["v=spf1 ip4:192.0.2.2 include:a.example.com -all"],
    })
    result = await SPFIncludeResolver(resolver).resolve("a.example.com")

    assert result.ip_ranges == ["192.0.2.1/32", "192.0.2.2/32"]
    assert result.errors == [
        "Include loop detected: a.example.com -> b.example.com -> a.example.com"
    ]
    assert resolver.queries == ["a.example.com", "b.example.com"]


@pytest.mark.asyncio
async def test_shared_include_is_resolved_once():
    resolver = FakeResolver({
        "root.example.com": ["v=spf1 include:b.example.com include:c.example.com -all"],
        "b.example.com": ["v=spf1 ip4:192.0.2.2 include:shared.example.com -all"],
        "c.example.com": ["v=spf1 ip4:192.0.2.3 include:shared.example.com -all"],
        "shared.example.com": ["v=spf1 ip4:192.0.2.99 -all"],
    })
    result = await SPFIncludeResolver(resolver).resolve("root.example.com")

    assert resolver.queries.count("shared.example.com") == 1
    assert sorted(result.ip_ranges) == ["192.0.2.2/32", "192.0.2.3/32", "192.0.2.99/32"]
    assert result.errors == []


@pytest.mark.asyncio
async def test_depth_limit():
    records = {
        f"l{i}.example.com": [f"v=spf1 ip4:10.0.0.{i} include:l{i + 1}.example.com -all"]
        for i in range(8)
    }
    resolver = FakeResolver(records)
    result = await SPFIncludeResolver(resolver, max_depth=3, max_lookups=50).resolve("l0.example.com")

    assert result.ip_ranges == ["10.0.0.0/32", "10.0.0.1/32", "10.0.0.2/32", "10.0.0.3/32"]
    assert result.errors == ["Recursion limit exceeded at l4.example.com (max depth 3)"]
    assert "l4.example.com" not in resolver.queries


@pytest.mark.asyncio
async def test_lookup_limit_is_shared_across_siblings():
    siblings = [f"s{i}.example.com" for i in range(12)]
    records = {"root.example.com": ["v=spf1 " + " ".join(f"include:{s}" for s in siblings) + " -all"]}
    records.update({s: [f"v=spf1 ip4:10.1.0.{i} -all"] for i, s in enumerate(siblings)})
    resolver = FakeResolver(records)

    result = await SPFIncludeResolver(resolver, max_lookups=10).resolve("root.example.com")

    assert len(resolver.queries) == 10
    assert len(result.ip_ranges) == 9
    limit_errors = [e for e in result.errors if e.startswith("Max DNS lookups (10) exceeded at ")]
    assert len(limit_errors) == 3


@pytest.mark.asyncio
async def test_partial_results_survive_broken_branches():
    resolver = FakeResolver(
        {
            "root.example.com": [
                "v=spf1 ip4:192.0.2.1 include:missing.example.com include:broken.example.com "
                "include:notspf.example.com -all"
            ],
            "notspf.example.com": ["google-site-verification=abc"],
        },
        failures={"broken.example.com": "timeout"},
    )
    result = await SPFIncludeResolver(resolver).resolve("root.example.com")

    assert result.ip_ranges == ["192.0.2.1/32"]
    assert result.errors == [
        "No SPF record found for missing.example.com",
        "Failed to resolve broken.example.com: timeout",
        "No SPF record found for notspf.example.com",
    ]


@pytest.mark.asyncio
async def test_missing_root_record():
    result = await SPFIncludeResolver(FakeResolver()).resolve("nothing.example.com")
    assert result.ip_ranges == []
    assert result.errors == ["No SPF record found for nothing.example.com"]


@pytest.mark.asyncio
async def test_duplicate_ranges_are_collapsed():
    resolver = FakeResolver({
        "root.example.com": ["v=spf1 ip4:192.0.2.1 include:b.example.com -all"],
        "b.example.com": ["v=spf1 ip4:192.0.2.1/32 ip4:192.0.2.2 -all"],
    })
    result = await SPFIncludeResolver(resolver).resolve("root.example.com")
    assert result.ip_ranges == ["192.0.2.1/32", "192.0.2.2/32"]


@pytest.mark.asyncio
async def test_range_cap():
    resolver = FakeResolver({"root.example.com": ["v=spf1 ip4:10.0.0.1 ip4:10.0.0.2 ip4:10.0.0.3 -all"]})
    result = await SPFIncludeResolver(resolver, max_ranges=2).resolve("root.example.com")

    assert result.ip_ranges == ["10.0.0.1/32", "10.0.0.2/32"]
    assert result.errors == ["Range limit (2) exceeded; 1 ranges dropped"]


@pytest.mark.asyncio
@pytest.mark.parametrize("target", ["", "   ", "include:", "not a host", "nodot"])
async def test_invalid_targets_are_rejected_before_any_query(target):
    resolver = FakeResolver()
    with pytest.raises(InvalidInputError):
        await SPFIncludeResolver(resolver).resolve(target)
    assert resolver.queries == []


def test_normalize_include():
    assert normalize_include("include:_spf.google.com") == "_spf.google.com"
    assert normalize_include("  INCLUDE:SendGrid.net ") == "sendgrid.net"


@pytest.mark.asyncio
async def test_cycle_between_sibling_includes_is_reported():
    resolver = FakeResolver({
        "a.example.com": ["v=spf1 include:b.example.com include:c.example.com -all"],
        "b.example.com": ["v=spf1 ip4:192.0.2.2 include:c.example.com -all"],
        "c.example.com": ["v=spf1 ip4:192.0.2.3 include:b.example.com -all"],
    })
    result = await SPFIncludeResolver(resolver).resolve("a.example.com")

    assert sorted(result.ip_ranges) == ["192.0.2.2/32", "192.0.2.3/32"]
    assert result.errors == [
        "Include loop detected: b.example.com -> c.example.com -> b.example.com"
    ]
    assert sorted(resolver.queries) == ["a.example.com", "b.example.com", "c.example.com"]


@pytest.mark.asyncio
async def test_self_include_is_reported_once():
    resolver = FakeResolver({
        "a.example.com": ["v=spf1 ip4:192.0.2.1 include:a.example.com include:A.example.com. -all"],
    })
    result = await SPFIncludeResolver(resolver).resolve("a.example.com")

    assert result.ip_ranges == ["192.0.2.1/32"]
    assert result.errors == ["Include loop detected: a.example.com -> a.example.com"]
    assert result.includes == []


@pytest.mark.asyncio
async def test_includes_only_lists_queried_hosts():
    records = {
        f"l{i}.example.com": [f"v=spf1 ip4:10.0.0.{i} include:l{i + 1}.example.com -all"]
        for i in range(5)
    }
    resolver = FakeResolver(records)
    result = await SPFIncludeResolver(resolver, max_depth=2, max_lookups=50).resolve("l0.example.com")

    assert result.includes == ["l1.example.com", "l2.example.com"]
    assert resolver.queries == ["l0.example.com", "l1.example.com", "l2.example.com"]

    siblings = [f"s{i}.example.com" for i in range(4)]
    resolver = FakeResolver({"root.example.com": ["v=spf1 " + " ".join(f"include:{s}" for s in siblings)]})
    result = await SPFIncludeResolver(resolver, max_lookups=3).resolve("root.example.com")

    assert result.includes == ["s0.example.com", "s1.example.com"]
    assert len([e for e in result.errors if e.startswith("Max DNS lookups (3)")]) == 2
