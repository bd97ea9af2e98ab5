"""Dual-pin orchestration engine."""

from dualpin.engine.orchestrator import DualPinOrchestrator

__all__ = ["DualPinOrchestrator"]
