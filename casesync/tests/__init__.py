"""Test suite for the casesync integration service.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - Minimal dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Integration tests for adapter implementations
   - SQLite on a temporary directory, SOAP over httpx.MockTransport
   - Validates adapter behavior and error handling

3. fakes/: Port implementations for testing
   - In-memory implementations of RecordStorePort, RemoteProtocolPort, etc.
   - Used by core unit tests
"""
