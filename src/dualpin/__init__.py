"""
dualpin: Dual-pin evidence storage with integrity verification.

Pins one payload to a durable primary network and a distributed mirror
network, binds both identifiers to a single SHA-256 digest, and optionally
records the mapping in an audit table for dispute resolution.
"""

__version__ = "0.1.0"
