"""
Test support utilities for prestowatch tests.

Helpers that are not pytest fixtures but are shared across test packages:
engine payload builders and a manually advanced clock live in ``engine``.
"""
