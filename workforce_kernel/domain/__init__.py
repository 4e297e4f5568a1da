"""Kernel domain value objects (clock, workflow)."""
