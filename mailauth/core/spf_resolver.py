"""
Recursive expansion of SPF ``include:`` targets into concrete address ranges.

Expansion is bounded three ways: a maximum include depth, a maximum number of
DNS lookups for the whole resolution, and a maximum number of returned ranges.
Includes on the same level are resolved concurrently; they share one visited
set and one lookup counter, both updated before the branch awaits anything, so
a cyclic or very wide include graph cannot fan out past the limits.

Every include edge seen while expanding is kept. Once expansion finishes, the
edge graph is walked from the requested target and each back-edge is reported
as a loop, whichever branch happened to reach it first.

Problems (missing records, DNS failures, loops, exceeded limits) are collected
as strings in ``SPFResolutionResult.errors``; whatever ranges were found on the
healthy branches are still returned.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Set

from mailauth.core.dns_client import TXTResolver
from mailauth.core.exceptions import DNSLookupError, RecordNotFound
from mailauth.core.record_parser import parse_spf_record
from mailauth.core.validation import validate_hostname
from mailauth.models.sender import SPFResolutionResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10
DEFAULT_MAX_LOOKUPS = 10
DEFAULT_MAX_RANGES = 100

INCLUDE_PREFIX = "include:"


def normalize_include(spf_include: str) -> str:
    """Strip whitespace and an optional ``include:`` prefix, then validate."""
    target = (spf_include or "").strip()
    if target.lower().startswith(INCLUDE_PREFIX):
        target = target[len(INCLUDE_PREFIX):]
    return validate_hostname(target)


def _host_key(host: str) -> str:
    return host.lower().rstrip(".")


def _with_prefix(address: str, default_prefix: int) -> str:
    return address if "/" in address else f"{address}/{default_prefix}"


def _unique(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def find_include_loops(edges: Dict[str, List[str]], root: str) -> List[List[str]]:
    """Depth-first walk of the include graph from *root*.

    Returns:
        One chain per back-edge, e.g. ``["a", "b", "a"]``
    """
    loops = []
    done: Set[str] = set()
    stack: List[str] = []

    def walk(node: str):
        stack.append(node)
        for child in edges.get(node, []):
            if child in stack:
                loops.append(stack[stack.index(child):] + [child])
            elif child not in done:
                walk(child)
        stack.pop()
        done.add(node)

    walk(root)
    return loops


@dataclass
class _Branch:
    """What one include target contributed, including its descendants."""
    ranges: List[str] = field(default_factory=list)
    includes: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def merge(self, other: "_Branch"):
        self.ranges.extend(other.ranges)
        self.includes.extend(other.includes)
        self.errors.extend(other.errors)


@dataclass
class _Guard:
    """State shared by every branch of one resolution."""
    visited: Set[str] = field(default_factory=set)
    lookups: int = 0
    edges: Dict[str, List[str]] = field(default_factory=dict)


class SPFIncludeResolver:
    """Flatten an SPF include into ip4/ip6 ranges."""

    def __init__(self, resolver: TXTResolver, max_depth: int = DEFAULT_MAX_DEPTH,
                 max_lookups: int = DEFAULT_MAX_LOOKUPS,
                 max_ranges: int = DEFAULT_MAX_RANGES):
        """Initialize SPF include resolver.

        Args:
            resolver: TXT resolver used for every lookup
            max_depth: Deepest include level that is still expanded (the
                requested target is level 0)
            max_lookups: Total TXT lookups allowed per resolution
            max_ranges: Ranges kept in the result; the rest are dropped with an error
        """
        self.resolver = resolver
        self.max_depth = max_depth
        self.max_lookups = max_lookups
        self.max_ranges = max_ranges

    async def resolve(self, spf_include: str) -> SPFResolutionResult:
        """Resolve an include target such as ``_spf.google.com`` or ``include:sendgrid.net``.

        ``includes`` lists the nested hostnames that were actually queried;
        the requested target itself is not repeated there.

        Raises:
            InvalidInputError: if the target is empty or not a hostname
        """
        target = normalize_include(spf_include)
        root = _host_key(target)
        guard = _Guard()
        branch = await self._expand(target, depth=0, guard=guard)

        ranges = _unique(branch.ranges)
        errors = list(branch.errors)
        for loop in find_include_loops(guard.edges, root):
            chain = " -> ".join(loop)
            logger.warning("SPF include loop: %s", chain)
            errors.append(f"Include loop detected: {chain}")
        if len(ranges) > self.max_ranges:
            errors.append(
                f"Range limit ({self.max_ranges}) exceeded; "
                f"{len(ranges) - self.max_ranges} ranges dropped"
            )
            ranges = ranges[:self.max_ranges]

        includes = [host for host in _unique(branch.includes) if host != root]
        logger.info(
            "Resolved SPF include %s: %d ranges, %d includes, %d errors",
            target, len(ranges), len(includes), len(errors)
        )
        return SPFResolutionResult(ip_ranges=ranges, includes=includes, errors=errors)

    async def _expand(self, target: str, depth: int, guard: _Guard) -> _Branch:
        key = _host_key(target)

        if key in guard.visited:
            # Already expanded elsewhere; loops are reported from the edge graph.
            return _Branch()
        if depth > self.max_depth:
            return _Branch(errors=[
                f"Recursion limit exceeded at {target} (max depth {self.max_depth})"
            ])
        if guard.lookups >= self.max_lookups:
            return _Branch(errors=[
                f"Max DNS lookups ({self.max_lookups}) exceeded at {target}"
            ])

        guard.visited.add(key)
        guard.lookups += 1

        try:
            records = await self.resolver.resolve_txt(target)
        except RecordNotFound:
            return _Branch(includes=[key], errors=[f"No SPF record found for {target}"])
        except DNSLookupError as exc:
            return _Branch(includes=[key], errors=[f"Failed to resolve {target}: {exc.reason}"])

        spf = next((p for p in map(parse_spf_record, records) if p is not None), None)
        if spf is None:
            return _Branch(includes=[key], errors=[f"No SPF record found for {target}"])

        guard.edges[key] = _unique([_host_key(include) for include in spf.includes])
        branch = _Branch(
            ranges=[_with_prefix(ip, 32) for ip in spf.ipv4]
            + [_with_prefix(ip, 128) for ip in spf.ipv6],
            includes=[key],
        )

        children = await asyncio.gather(*(
            self._expand(include, depth + 1, guard)
            for include in spf.includes
        ))
        for child in children:
            branch.merge(child)

        return branch


async def resolve_spf_include(resolver: TXTResolver, spf_include: str,
                              **limits) -> SPFResolutionResult:
    """Convenience wrapper around ``SPFIncludeResolver.resolve``."""
    return await SPFIncludeResolver(resolver, **limits).resolve(spf_include)
