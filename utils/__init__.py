"""Shared numeric, serialization, and settings helpers."""
