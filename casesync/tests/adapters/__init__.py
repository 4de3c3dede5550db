"""Integration tests for adapter implementations.

These tests exercise adapters against temporary databases and mocked
HTTP transports to validate translation between core domain models and
external formats.
"""
