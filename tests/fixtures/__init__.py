# tests/fixtures/__init__.py
"""Shared test constants and response builders for dualpin tests."""
