"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core, stores,
or engine. Settings classes are NOT re-exported here - import them from
dualpin.core.config.

Import patterns:
    from dualpin.contracts import PutOptions, StoredRef, TransportError
    from dualpin.core.config import DualPinSettings
"""

from dualpin.contracts.audit import EvidenceRecord, StoredEvidenceRecord
from dualpin.contracts.enums import Backend, EvidenceRole
from dualpin.contracts.errors import (
    DualPinError,
    IntegrityError,
    TransportError,
    ValidationError,
)
from dualpin.contracts.storage import (
    DEFAULT_CONTENT_TYPE,
    ContentLike,
    DualPinResult,
    IntegritySummary,
    ProbeResult,
    PutOptions,
    StorageAdapter,
    StoredRef,
    VerificationReport,
)

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "Backend",
    "ContentLike",
    "DualPinError",
    "DualPinResult",
    "EvidenceRecord",
    "EvidenceRole",
    "IntegrityError",
    "IntegritySummary",
    "ProbeResult",
    "PutOptions",
    "StorageAdapter",
    "StoredEvidenceRecord",
    "StoredRef",
    "TransportError",
    "ValidationError",
    "VerificationReport",
]
