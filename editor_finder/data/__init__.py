"""Packaged data tables (origin registry, parser vocabulary)."""
