"""
Database layer for monitored domains and the known-sender catalog.
Uses SQLite for persistence.

The catalog has two tiers: global entries (visible to every organization,
never written through organization calls) and organization entries (visible
and writable only by their owner). Reads always return the union of the
global tier and the caller's tier.
"""
import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from mailauth.core.exceptions import DuplicateDomainError, NotFoundError, PermissionDeniedError
from mailauth.models.domain import DomainRecord
from mailauth.models.sender import KnownSender

logger = logging.getLogger(__name__)

SENDER_FIELDS = (
    "name", "description", "category", "logo_url", "website",
    "spf_include", "ip_ranges", "dkim_domains",
)
JSON_FIELDS = ("ip_ranges", "dkim_domains")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MailAuthDatabase:
    """Database manager for domains and known senders."""

    def __init__(self, db_path: str = "./data/mailauth.db"):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._init_database()

    @contextmanager
    def _get_connection(self):
        """Get database connection context manager."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _init_database(self):
        """Initialize database tables if they don't exist."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS domains (
                    id TEXT PRIMARY KEY,
                    organization_id TEXT NOT NULL,
                    domain TEXT NOT NULL,
                    verification_token TEXT,
                    verified_at TEXT,
                    verified_by TEXT,
                    spf_record TEXT,
                    dmarc_record TEXT,
                    last_dns_check TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_domains_org_domain
                ON domains(organization_id, domain)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_domains_domain ON domains(domain)
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS known_senders (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT,
                    category TEXT NOT NULL,
                    logo_url TEXT,
                    website TEXT,
                    spf_include TEXT,
                    ip_ranges TEXT NOT NULL DEFAULT '[]',
                    dkim_domains TEXT NOT NULL DEFAULT '[]',
                    spf_resolved_at TEXT,
                    is_global INTEGER NOT NULL DEFAULT 0,
                    organization_id TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_senders_name ON known_senders(name)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_senders_org ON known_senders(organization_id)
            """)

            conn.commit()

    # ------------------------------------------------------------------
    # Domains
    # ------------------------------------------------------------------

    def create_domain(self, organization_id: str, domain: str,
                      verification_token: str) -> DomainRecord:
        """Insert a new domain for an organization.

        Args:
            organization_id: Owning organization
            domain: Normalized domain name
            verification_token: Token the owner must publish

        Returns:
            Stored DomainRecord

        Raises:
            DuplicateDomainError: if the organization already has this domain
        """
        now = _now()
        domain_id = str(uuid.uuid4())

        with self._get_connection() as conn:
            try:
                conn.execute("""
                    INSERT INTO domains
                    (id, organization_id, domain, verification_token, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (domain_id, organization_id, domain, verification_token, now, now))
                conn.commit()
            except sqlite3.IntegrityError as exc:
                raise DuplicateDomainError(f"Domain {domain} already exists") from exc

        logger.info("Added domain %s for organization %s", domain, organization_id)
        return self.get_domain(organization_id, domain_id)

    def get_domain(self, organization_id: str, domain_id: str) -> Optional[DomainRecord]:
        """Get a domain by ID within an organization."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM domains WHERE id = ? AND organization_id = ?",
                (domain_id, organization_id)
            ).fetchone()
            return self._row_to_domain(row) if row else None

    def list_domains(self, organization_id: str) -> List[DomainRecord]:
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM domains WHERE organization_id = ? ORDER BY domain ASC",
                (organization_id,)
            ).fetchall()
            return [self._row_to_domain(row) for row in rows]

    def mark_domain_verified(self, domain_id: str, verified_at: datetime,
                             verified_by: str) -> bool:
        """Set the verification timestamp and actor.

        The update only applies while ``verified_at`` is still empty, so an
        existing verification is never overwritten.

        Returns:
            True if this call verified the domain
        """
        with self._get_connection() as conn:
            cursor = conn.execute("""
                UPDATE domains
                SET verified_at = ?, verified_by = ?, updated_at = ?
                WHERE id = ? AND verified_at IS NULL
            """, (verified_at.isoformat(), verified_by, _now(), domain_id))
            conn.commit()
            return cursor.rowcount == 1

    def update_domain_dns(self, domain_id: str, checked_at: datetime, **records):
        """Cache freshly fetched records.

        Args:
            domain_id: Domain ID
            checked_at: Time of the DNS check
            **records: ``spf_record`` and/or ``dmarc_record`` values to store
        """
        updates: Dict = {key: records[key] for key in ("spf_record", "dmarc_record")
                         if key in records}
        updates["last_dns_check"] = checked_at.isoformat()
        updates["updated_at"] = _now()

        set_clause = ", ".join([f"{key} = ?" for key in updates.keys()])
        values = list(updates.values())
        values.append(domain_id)

        with self._get_connection() as conn:
            conn.execute(f"UPDATE domains SET {set_clause} WHERE id = ?", values)
            conn.commit()

    # ------------------------------------------------------------------
    # Known senders
    # ------------------------------------------------------------------

    def list_visible_senders(self, organization_id: str) -> List[KnownSender]:
        """Global senders plus the organization's own, ordered by name."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM known_senders
                WHERE is_global = 1 OR organization_id = ?
                ORDER BY name ASC, id ASC
            """, (organization_id,)).fetchall()
            return [self._row_to_sender(row) for row in rows]

    def count_global_senders(self) -> int:
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM known_senders WHERE is_global = 1"
            ).fetchone()[0]

    def get_sender(self, sender_id: str) -> Optional[KnownSender]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM known_senders WHERE id = ?", (sender_id,)
            ).fetchone()
            return self._row_to_sender(row) if row else None

    def get_visible_sender(self, organization_id: str, sender_id: str) -> KnownSender:
        """Fetch a sender the organization is allowed to see.

        Raises:
            NotFoundError: if missing or owned by another organization
        """
        sender = self.get_sender(sender_id)
        if sender is None or (not sender.is_global and sender.organization_id != organization_id):
            raise NotFoundError("Known sender not found")
        return sender

    def get_owned_sender(self, organization_id: str, sender_id: str,
                          action: str = "modify") -> KnownSender:
        sender = self.get_visible_sender(organization_id, sender_id)
        if sender.is_global:
            raise PermissionDeniedError(f"Cannot {action} this known sender")
        return sender

    def create_org_sender(self, organization_id: str, data: Dict) -> KnownSender:
        """Create an organization-scoped sender."""
        sender_id = str(uuid.uuid4())
        self._insert_sender(sender_id, data, is_global=False, organization_id=organization_id)
        logger.info("Created known sender %s for organization %s", data.get("name"), organization_id)
        return self.get_sender(sender_id)

    def update_org_sender(self, organization_id: str, sender_id: str,
                          updates: Dict) -> KnownSender:
        """Apply a partial update to an organization-scoped sender.

        Raises:
            NotFoundError: sender not visible to the organization
            PermissionDeniedError: sender is global
        """
        self.get_owned_sender(organization_id, sender_id)
        fields = {key: value for key, value in updates.items() if key in SENDER_FIELDS}
        if fields:
            self._update_sender(sender_id, fields)
        return self.get_sender(sender_id)

    def delete_org_sender(self, organization_id: str, sender_id: str):
        self.get_owned_sender(organization_id, sender_id, action="delete")
        with self._get_connection() as conn:
            conn.execute("DELETE FROM known_senders WHERE id = ?", (sender_id,))
            conn.commit()
        logger.info("Deleted known sender %s", sender_id)

    def set_sender_ip_ranges(self, organization_id: str, sender_id: str,
                             ip_ranges: List[str], resolved_at: datetime) -> KnownSender:
        """Replace an organization sender's ranges with freshly resolved ones."""
        self.get_owned_sender(organization_id, sender_id)
        self._update_sender(sender_id, {
            "ip_ranges": ip_ranges,
            "spf_resolved_at": resolved_at.isoformat(),
        })
        return self.get_sender(sender_id)

    def seed_global_senders(self, entries: Iterable[Dict]) -> int:
        """Insert global senders whose name is not in the global tier yet.

        Returns:
            Number of senders inserted
        """
        with self._get_connection() as conn:
            existing = {
                row["name"] for row in conn.execute(
                    "SELECT name FROM known_senders WHERE is_global = 1"
                ).fetchall()
            }

        inserted = 0
        for entry in entries:
            if entry["name"] in existing:
                continue
            self._insert_sender(str(uuid.uuid4()), entry, is_global=True, organization_id=None)
            existing.add(entry["name"])
            inserted += 1

        if inserted:
            logger.info("Seeded %d global known senders", inserted)
        return inserted

    def _insert_sender(self, sender_id: str, data: Dict, is_global: bool,
                       organization_id: Optional[str]):
        now = _now()
        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO known_senders
                (id, name, description, category, logo_url, website, spf_include,
                 ip_ranges, dkim_domains, is_global, organization_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                sender_id,
                data["name"],
                data.get("description"),
                data["category"],
                data.get("logo_url"),
                data.get("website"),
                data.get("spf_include"),
                json.dumps(data.get("ip_ranges") or []),
                json.dumps(data.get("dkim_domains") or []),
                1 if is_global else 0,
                organization_id,
                now,
                now
            ))
            conn.commit()

    def _update_sender(self, sender_id: str, updates: Dict):
        updates = dict(updates)
        for key in JSON_FIELDS:
            if key in updates:
                updates[key] = json.dumps(updates[key] or [])
        updates["updated_at"] = _now()

        set_clause = ", ".join([f"{key} = ?" for key in updates.keys()])
        values = list(updates.values())
        values.append(sender_id)

        with self._get_connection() as conn:
            conn.execute(f"UPDATE known_senders SET {set_clause} WHERE id = ?", values)
            conn.commit()

    def _row_to_domain(self, row: sqlite3.Row) -> DomainRecord:
        return DomainRecord(**dict(row))

    def _row_to_sender(self, row: sqlite3.Row) -> KnownSender:
        data = dict(row)
        for key in JSON_FIELDS:
            data[key] = json.loads(data[key] or "[]")
        data["is_global"] = bool(data["is_global"])
        return KnownSender(**data)
