"""Adapter-free reconciliation domain for client fact-find records."""
