"""Core primitives: errors, settings, dedup cache, shared context, health, scheduling."""
