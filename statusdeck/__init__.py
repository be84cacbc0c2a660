"""
statusdeck - Status-report deck ingestion

Converts recurring status-report decks (one HTML document per reporting period,
one slide per team) into a normalized relational record model.

Architecture:
- Ingest Context: Tolerant markup parsing, text normalization, ticket extraction
- Storage Context: Reference resolution, loading, and post-load validation
"""

__version__ = "0.1.0"
