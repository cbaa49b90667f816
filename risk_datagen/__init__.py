"""Deterministic synthetic risk profiles, claims history and risk summaries."""
