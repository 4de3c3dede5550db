"""Record store adapters for applicants and cases.

Implementations:
- SQLite (zero-config, single-file)
"""
