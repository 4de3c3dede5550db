"""Credential store adapters.

Implementations:
- File (named basic-auth profiles in a JSON document)
"""
