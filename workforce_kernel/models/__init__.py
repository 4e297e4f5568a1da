"""Kernel ORM models."""
