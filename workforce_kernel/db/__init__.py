"""Database layer - engine, base classes, immutability listeners."""
