"""Shared helpers (logging, file IO)."""
