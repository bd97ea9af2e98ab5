# src/dualpin/core/audit/schema.py
"""SQLAlchemy table definitions for the evidence audit trail.

Uses SQLAlchemy Core (not ORM) for explicit control over queries
and compatibility with SQLite and PostgreSQL.
"""

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)

from dualpin.contracts.enums import EvidenceRole

# Shared metadata for all tables
metadata = MetaData()

_ROLE_VALUES = ", ".join(f"'{role.value}'" for role in EvidenceRole)

# === Evidence Records ===
# One row per successful dual-pin call that carried business metadata.
# Rows are append-only: never updated, never deleted by dualpin.

evidence_records_table = Table(
    "evidence_records",
    metadata,
    # BigInteger on PostgreSQL (bigserial); SQLite only autoincrements INTEGER
    Column("id", BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True),
    Column("transaction_id", Text, nullable=False),
    Column("role", Text, nullable=False),
    Column("sha256", String(64), nullable=False),  # lowercase hex
    Column("primary_cid", Text, nullable=False),  # Arweave tx id by default
    Column("mirror_cid", Text, nullable=False),  # IPFS CID by default
    Column("content_type", Text),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(f"role IN ({_ROLE_VALUES})", name="evidence_records_role_check"),
)

Index("evidence_records_transaction_idx", evidence_records_table.c.transaction_id)
Index("evidence_records_created_idx", evidence_records_table.c.created_at)
