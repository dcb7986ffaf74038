"""
Configuration checker script.
Run this to see the effective settings and whether DNS resolution works.
"""
import asyncio

from config.settings import settings
from mailauth.core.dns_client import DNSPythonResolver
from mailauth.core.exceptions import MailAuthError

print("=" * 60)
print("Configuration Check")
print("=" * 60)

print("\n[Paths]")
print(f"  Data Directory: {settings.data_dir}")
print(f"  Database Path: {settings.database_path}")
print(f"  Seed Known Senders: {settings.seed_known_senders}")

print("\n[Server]")
print(f"  Host: {settings.host}")
print(f"  Port: {settings.port}")
print(f"  Debug: {settings.debug}")
print(f"  App Name: {settings.app_name}")
print(f"  Version: {settings.app_version}")
print(f"  Allowed Origins: {settings.cors_origins}")

print("\n[DNS]")
print(f"  Timeout: {settings.dns_timeout}s")
print(f"  Nameservers: {settings.dns_nameservers or 'system default'}")
print(f"  SPF max depth / lookups / ranges: "
      f"{settings.spf_max_depth} / {settings.spf_max_lookups} / {settings.spf_max_ranges}")
print(f"  DKIM probe limit: {settings.dkim_probe_limit}")

print("\n[Logging]")
print(f"  Level: {settings.log_level}")
print(f"  File: {settings.log_file or 'stderr only'}")

print("\n[DNS Check]")
resolver = DNSPythonResolver(timeout=settings.dns_timeout, nameservers=settings.dns_nameservers)
try:
    records = asyncio.run(resolver.resolve_txt("google.com"))
    print(f"  ✓ TXT lookup for google.com returned {len(records)} records")
except MailAuthError as exc:
    print(f"  ✗ TXT lookup for google.com failed: {exc}")

print("\n" + "=" * 60)
print("Configuration Check Complete")
print("=" * 60)
