"""Core session broker domain: exceptions, store, request validation and signing."""
