"""Use case orchestration layer."""
