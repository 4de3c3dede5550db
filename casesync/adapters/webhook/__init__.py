"""Webhook receiver adapters.

Provides HTTP endpoints for external systems to request synchronization
of an applicant by identifier.
"""
