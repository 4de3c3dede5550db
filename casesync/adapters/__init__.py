"""External adapters for the casesync integration service.

This package contains all external dependencies (SQLite, httpx, HTTP
servers, etc.) and provides implementations of the core port interfaces.

Adapter Organization:

- store/: Applicant and case persistence (SQLite)
- credentials/: Authentication profile lookup (JSON file)
- soap/: Outbound SOAP operations against the case-management system
- webhook/: HTTP receiver for synchronize-by-identifier requests
"""
