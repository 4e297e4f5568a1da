"""Batch item handler contracts."""
