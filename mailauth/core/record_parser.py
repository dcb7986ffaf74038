"""
Parsing and validation of published SPF, DMARC and DKIM records.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from mailauth.models.dns import ValidationIssue

QUALIFIERS = {
    "+": "pass",
    "-": "fail",
    "~": "softfail",
    "?": "neutral",
}

# Mechanisms and modifiers that cost a DNS lookup when an SPF record is evaluated.
LOOKUP_MECHANISMS = ("include", "a", "mx", "ptr", "exists")


@dataclass
class SPFMechanism:
    qualifier: str  # one of QUALIFIERS keys
    name: str  # lowercased mechanism name, e.g. "include"
    value: str = ""  # text after "name:" (or "name/"), may be empty

    @property
    def result(self) -> str:
        return QUALIFIERS[self.qualifier]


@dataclass
class SPFRecord:
    raw: str
    mechanisms: List[SPFMechanism] = field(default_factory=list)
    modifiers: Dict[str, str] = field(default_factory=dict)

    def _values(self, name: str) -> List[str]:
        return [m.value for m in self.mechanisms if m.name == name and m.value]

    @property
    def includes(self) -> List[str]:
        return self._values("include")

    @property
    def ipv4(self) -> List[str]:
        return self._values("ip4")

    @property
    def ipv6(self) -> List[str]:
        return self._values("ip6")

    @property
    def all_mechanism(self) -> Optional[SPFMechanism]:
        for mechanism in self.mechanisms:
            if mechanism.name == "all":
                return mechanism
        return None

    @property
    def lookup_count(self) -> int:
        count = sum(1 for m in self.mechanisms if m.name in LOOKUP_MECHANISMS)
        if "redirect" in self.modifiers:
            count += 1
        return count


@dataclass
class DMARCRecord:
    raw: str
    version: Optional[str] = None
    policy: Optional[str] = None
    subdomain_policy: Optional[str] = None
    percentage: Optional[int] = None
    rua: List[str] = field(default_factory=list)
    ruf: List[str] = field(default_factory=list)
    dkim_alignment: Optional[str] = None
    spf_alignment: Optional[str] = None
    failure_options: Optional[str] = None
    report_interval: Optional[int] = None


@dataclass
class DKIMRecord:
    raw: str
    version: Optional[str] = None
    key_type: Optional[str] = None
    public_key: Optional[str] = None
    hash_algorithms: List[str] = field(default_factory=list)
    service_types: List[str] = field(default_factory=list)
    flags: Optional[str] = None
    notes: Optional[str] = None


def parse_spf_record(record: Optional[str]) -> Optional[SPFRecord]:
    """Split an SPF record into mechanisms and modifiers.

    Qualifiers are separated out and mechanism names lowercased, so
    ``~INCLUDE:_spf.example.com`` becomes ``SPFMechanism("~", "include", "_spf.example.com")``.
    Returns None when the text is not an SPF record.
    """
    if not record:
        return None
    terms = record.split()
    if not terms or terms[0].lower() != "v=spf1":
        return None

    parsed = SPFRecord(raw=record)
    for term in terms[1:]:
        name_part = term.split(":", 1)[0].split("/", 1)[0]
        if "=" in name_part:
            key, _, value = term.partition("=")
            parsed.modifiers[key.lower()] = value
            continue

        qualifier = "+"
        if term[0] in QUALIFIERS:
            qualifier, term = term[0], term[1:]
        if not term:
            continue

        if ":" in term:
            name, _, value = term.partition(":")
        elif "/" in term:
            name, _, cidr = term.partition("/")
            value = "/" + cidr
        else:
            name, value = term, ""

        parsed.mechanisms.append(SPFMechanism(qualifier, name.lower(), value))

    return parsed


def _split_tags(record: str) -> Dict[str, str]:
    tags = {}
    for part in record.split(";"):
        key, sep, value = part.partition("=")
        if not sep:
            continue
        tags[key.strip().lower()] = value.strip()
    return tags


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _mailto_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    addresses = []
    for item in value.split(","):
        item = item.strip()
        if item.lower().startswith("mailto:"):
            item = item[len("mailto:"):]
        if item:
            addresses.append(item)
    return addresses


def parse_dmarc_record(record: Optional[str]) -> Optional[DMARCRecord]:
    """Parse a DMARC policy record; None unless it starts with ``v=DMARC1``."""
    if not record or not record.startswith("v=DMARC1"):
        return None

    tags = _split_tags(record)
    return DMARCRecord(
        raw=record,
        version=tags.get("v"),
        policy=tags.get("p"),
        subdomain_policy=tags.get("sp"),
        percentage=_to_int(tags.get("pct")),
        rua=_mailto_list(tags.get("rua")),
        ruf=_mailto_list(tags.get("ruf")),
        dkim_alignment=tags.get("adkim"),
        spf_alignment=tags.get("aspf"),
        failure_options=tags.get("fo"),
        report_interval=_to_int(tags.get("ri")),
    )


def parse_dkim_record(record: Optional[str]) -> Optional[DKIMRecord]:
    """Parse a DKIM key record into its tags."""
    if not record:
        return None

    tags = _split_tags(record)
    return DKIMRecord(
        raw=record,
        version=tags.get("v"),
        key_type=tags.get("k"),
        public_key=tags.get("p"),
        hash_algorithms=[h for h in tags.get("h", "").split(":") if h],
        service_types=[s for s in tags.get("s", "").split(":") if s],
        flags=tags.get("t"),
        notes=tags.get("n"),
    )


def validate_dmarc_record(record: Optional[str]) -> List[ValidationIssue]:
    parsed = parse_dmarc_record(record)
    if parsed is None:
        return [ValidationIssue(severity="error",
                                message="Invalid DMARC record. Must start with v=DMARC1")]

    issues = []
    if not parsed.policy:
        issues.append(ValidationIssue(severity="error",
                                      message="Missing required policy (p=) tag", field="p"))
    elif parsed.policy == "none":
        issues.append(ValidationIssue(
            severity="warning",
            message='Policy is set to "none" - emails are not being quarantined or rejected',
            field="p"))

    if not parsed.rua:
        issues.append(ValidationIssue(
            severity="warning",
            message="No aggregate report email (rua) specified - you will not receive DMARC reports",
            field="rua"))

    if parsed.percentage is not None and parsed.percentage < 100:
        issues.append(ValidationIssue(
            severity="info",
            message=f"Policy applies to only {parsed.percentage}% of emails. "
                    "Consider 100% for full protection.",
            field="pct"))

    if parsed.dkim_alignment == "s":
        issues.append(ValidationIssue(severity="info",
                                      message="DKIM alignment is set to strict mode", field="adkim"))
    if parsed.spf_alignment == "s":
        issues.append(ValidationIssue(severity="info",
                                      message="SPF alignment is set to strict mode", field="aspf"))
    return issues


def validate_spf_record(record: Optional[str]) -> List[ValidationIssue]:
    parsed = parse_spf_record(record)
    if parsed is None:
        return [ValidationIssue(severity="error",
                                message="Invalid SPF record. Must start with v=spf1")]

    issues = []
    all_mechanism = parsed.all_mechanism
    if all_mechanism is None and "redirect" not in parsed.modifiers:
        issues.append(ValidationIssue(
            severity="warning",
            message='SPF record does not end with an "all" mechanism. '
                    "This may allow unauthorized senders."))
    elif all_mechanism is not None and all_mechanism.result in ("pass", "neutral"):
        issues.append(ValidationIssue(
            severity="warning",
            message='SPF record ends with "+all" or "?all" which allows all senders. '
                    'Consider using "-all" (hard fail) or "~all" (soft fail).'))

    lookups = parsed.lookup_count
    if lookups > 10:
        issues.append(ValidationIssue(
            severity="error",
            message=f"SPF record exceeds 10 DNS lookup limit (currently {lookups}). "
                    "This will cause SPF validation to fail."))
    elif lookups > 7:
        issues.append(ValidationIssue(
            severity="warning",
            message=f"SPF record has {lookups} DNS lookups (limit is 10). "
                    "Consider reducing to avoid hitting the limit."))

    if len(parsed.includes) > 5:
        issues.append(ValidationIssue(
            severity="info",
            message=f"SPF record has {len(parsed.includes)} include mechanisms. "
                    "Consider consolidating to reduce DNS lookups."))
    return issues


def validate_dkim_record(record: Optional[str]) -> List[ValidationIssue]:
    parsed = parse_dkim_record(record)
    if parsed is None:
        return [ValidationIssue(severity="error", message="Invalid DKIM record")]

    issues = []
    if not parsed.public_key:
        issues.append(ValidationIssue(severity="error",
                                      message="Missing public key (p=) in DKIM record", field="p"))
    elif len(parsed.public_key) < 200:
        issues.append(ValidationIssue(
            severity="warning",
            message="Public key seems short. Ensure it is a valid RSA or Ed25519 key.",
            field="p"))

    if parsed.key_type and parsed.key_type not in ("rsa", "ed25519"):
        issues.append(ValidationIssue(
            severity="warning",
            message=f'Unknown key type: {parsed.key_type}. Common types are "rsa" or "ed25519".',
            field="k"))

    if parsed.flags and "y" in parsed.flags.split(":"):
        issues.append(ValidationIssue(
            severity="warning",
            message="DKIM record is in testing mode (t=y). Remove this flag when ready for production.",
            field="t"))

    if not parsed.version:
        issues.append(ValidationIssue(severity="info",
                                      message="DKIM version tag (v=) is optional but recommended",
                                      field="v"))
    return issues


VALIDATORS = {
    "dmarc": validate_dmarc_record,
    "spf": validate_spf_record,
    "dkim": validate_dkim_record,
}


def get_recommendations(kind: str, record: Optional[str]) -> List[str]:
    """Human-readable next steps for a record (or its absence)."""
    if not record:
        if kind == "dmarc":
            return [
                "No DMARC record found. Consider adding one to protect your domain from email spoofing.",
                "Start with a monitoring policy: v=DMARC1; p=none; rua=mailto:dmarc@yourdomain.com",
            ]
        if kind == "spf":
            return [
                "No SPF record found. Add an SPF record to specify which servers can send email for your domain.",
                "Example: v=spf1 include:_spf.google.com ~all",
            ]
        return [
            "No DKIM record found for this selector. Ensure you are using the correct selector.",
            "DKIM records are added by your email service provider.",
        ]

    recommendations = []
    if kind == "dmarc":
        parsed = parse_dmarc_record(record)
        if parsed and parsed.policy == "none":
            recommendations.append(
                "Your DMARC policy is in monitoring mode. Once you have verified SPF and DKIM are "
                "working correctly, consider moving to p=quarantine or p=reject.")
            recommendations.append(
                "Monitor your aggregate reports (rua) for at least 2-4 weeks before tightening the policy.")
        if not parsed or not parsed.ruf:
            recommendations.append(
                "Consider adding forensic reporting (ruf=) to receive samples of failed messages.")
    elif kind == "spf":
        parsed = parse_spf_record(record)
        all_mechanism = parsed.all_mechanism if parsed else None
        if all_mechanism is None or all_mechanism.result != "fail":
            recommendations.append(
                'Consider using "-all" instead of "~all" for stronger protection once you have '
                "verified all legitimate senders are included.")
    elif kind == "dkim":
        parsed = parse_dkim_record(record)
        if parsed and parsed.flags and "y" in parsed.flags.split(":"):
            recommendations.append(
                'Your DKIM key is in testing mode. Remove "t=y" when ready for production.')
    return recommendations
