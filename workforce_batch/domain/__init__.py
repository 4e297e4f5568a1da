"""Batch domain types."""
