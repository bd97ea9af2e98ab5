# tests/conftest.py
"""Shared test fixtures.

Storage adapters are exercised against respx-mocked gateways; nothing in the
suite touches a real network. The audit recorder runs on in-memory SQLite.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import logging
import os
from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from hypothesis import Verbosity, settings

from dualpin.core.audit import EvidenceDB, EvidenceRecorder
from dualpin.stores import ArweaveStore, IpfsStore
from tests.fixtures.gateways import ARWEAVE_ENDPOINT, ARWEAVE_GATEWAY, IPFS_ENDPOINT, IPFS_GATEWAY

settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("nightly", max_examples=1000, deadline=None)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose, deadline=None)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture
def evidence_db() -> Iterator[EvidenceDB]:
    db = EvidenceDB.in_memory()
    yield db
    db.close()


@pytest.fixture
def recorder(evidence_db: EvidenceDB) -> EvidenceRecorder:
    return EvidenceRecorder(evidence_db)


@pytest_asyncio.fixture
async def arweave_store() -> AsyncIterator[ArweaveStore]:
    store = ArweaveStore(endpoint=ARWEAVE_ENDPOINT, public_gateway=ARWEAVE_GATEWAY, auth_token="Bearer arweave-secret")
    yield store
    await store.aclose()


@pytest_asyncio.fixture
async def ipfs_store() -> AsyncIterator[IpfsStore]:
    store = IpfsStore(endpoint=IPFS_ENDPOINT, public_gateway=IPFS_GATEWAY, auth_token="Basic aXBmczpzZWNyZXQ=")
    yield store
    await store.aclose()


@pytest.fixture
def _restore_root_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by the code under test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
