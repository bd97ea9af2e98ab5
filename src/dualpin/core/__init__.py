"""Core infrastructure: digests, configuration, logging, audit trail."""
