"""Reconciliation and metrics history."""
