"""Boundary adapters for external systems."""
