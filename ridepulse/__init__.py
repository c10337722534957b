"""GBFS bike-share feed ingestion, reconciliation and metrics history."""

__version__ = "0.1.0"
