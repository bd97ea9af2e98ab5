# tests/unit/core/audit/test_evidence_db.py
"""Tests for evidence database connection management and migration."""

import threading
from pathlib import Path

from sqlalchemy import inspect, text

from dualpin.core.audit import EvidenceDB, evidence_records_table
from dualpin.core.audit.database import _normalize_url


class TestEvidenceDBConnection:
    """Connection setup and lifecycle."""

    def test_migrate_creates_table_and_indexes(self, tmp_path: Path) -> None:
        db = EvidenceDB(f"sqlite:///{tmp_path / 'evidence.db'}")
        db.migrate()

        inspector = inspect(db.engine)
        assert "evidence_records" in inspector.get_table_names()
        index_names = {ix["name"] for ix in inspector.get_indexes("evidence_records")}
        assert {"evidence_records_transaction_idx", "evidence_records_created_idx"} <= index_names
        db.close()

    def test_constructor_does_not_create_tables(self, tmp_path: Path) -> None:
        db = EvidenceDB(f"sqlite:///{tmp_path / 'evidence.db'}")

        assert "evidence_records" not in inspect(db.engine).get_table_names()
        db.close()

    def test_migrate_is_idempotent(self, tmp_path: Path) -> None:
        db = EvidenceDB(f"sqlite:///{tmp_path / 'evidence.db'}")
        db.migrate()
        db.migrate()

        assert inspect(db.engine).get_table_names().count("evidence_records") == 1
        db.close()

    def test_sqlite_wal_mode(self, tmp_path: Path) -> None:
        db = EvidenceDB(f"sqlite:///{tmp_path / 'evidence.db'}")

        with db.engine.connect() as conn:
            assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"
        db.close()

    def test_context_manager_closes(self, tmp_path: Path) -> None:
        with EvidenceDB(f"sqlite:///{tmp_path / 'evidence.db'}") as db:
            assert db.engine is not None

        assert db._engine is None

    def test_close_twice_is_safe(self) -> None:
        db = EvidenceDB.in_memory()
        db.close()
        db.close()


class TestInMemory:
    def test_in_memory_is_migrated(self) -> None:
        db = EvidenceDB.in_memory()

        assert "evidence_records" in inspect(db.engine).get_table_names()
        db.close()

    def test_connections_share_one_database(self) -> None:
        db = EvidenceDB.in_memory()
        with db.connection() as conn:
            conn.execute(text("CREATE TABLE scratch (x INTEGER)"))
        with db.connection() as conn:
            conn.execute(text("INSERT INTO scratch VALUES (1)"))
        with db.connection() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM scratch")).scalar() == 1
        db.close()

    def test_worker_threads_see_the_migrated_database(self) -> None:
        db = EvidenceDB.in_memory()

        def _insert() -> None:
            with db.connection() as conn:
                conn.execute(
                    evidence_records_table.insert().values(
                        transaction_id="DEAL-1", role="buyer", sha256="0" * 64, primary_cid="tx", mirror_cid="bafy"
                    )
                )

        worker = threading.Thread(target=_insert)
        worker.start()
        worker.join()

        with db.connection() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM evidence_records")).scalar() == 1
        db.close()


class TestNormalizeUrl:
    def test_bare_postgresql_uses_psycopg(self) -> None:
        assert _normalize_url("postgresql://u:p@db/escrow") == "postgresql+psycopg://u:p@db/escrow"

    def test_postgres_alias_uses_psycopg(self) -> None:
        assert _normalize_url("postgres://u@db/escrow").startswith("postgresql+psycopg://")

    def test_explicit_driver_kept(self) -> None:
        assert _normalize_url("postgresql+asyncpg://u@db/escrow") == "postgresql+asyncpg://u@db/escrow"

    def test_sqlite_untouched(self) -> None:
        assert _normalize_url("sqlite:///./evidence.db") == "sqlite:///./evidence.db"
