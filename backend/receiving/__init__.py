"""Inbound receipt verification & reconciliation backend."""

__version__ = "0.1.0"
