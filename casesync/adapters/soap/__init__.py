"""SOAP adapters for the external case-management system.

- templates: named message templates and envelope rendering
- client: RemoteProtocolPort implementation over httpx
"""
