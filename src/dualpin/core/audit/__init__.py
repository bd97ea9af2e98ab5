"""Evidence audit trail: who submitted what, pinned where, hashing to what.

Primary API:
    EvidenceRecorder - append and query evidence rows
    EvidenceDB - database connection management and migration
"""

from dualpin.core.audit.database import EvidenceDB
from dualpin.core.audit.recorder import MAX_RECENT_LIMIT, MIN_RECENT_LIMIT, EvidenceRecorder
from dualpin.core.audit.schema import evidence_records_table, metadata

__all__ = [
    "MAX_RECENT_LIMIT",
    "MIN_RECENT_LIMIT",
    "EvidenceDB",
    "EvidenceRecorder",
    "evidence_records_table",
    "metadata",
]
