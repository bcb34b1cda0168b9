"""Contextual logging."""
