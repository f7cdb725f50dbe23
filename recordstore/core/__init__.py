"""
Core utilities shared across the recordstore package.

This package hosts configuration helpers (env vars, paths), logging setup and
small collection helpers that do not depend on a particular record type.
"""
