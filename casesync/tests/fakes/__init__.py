"""Fake/mock implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeRecordStorePort: In-memory applicants and cases
- FakeCredentialStorePort: In-memory auth profiles
- FakeRemoteProtocolPort: Canned remote responses and faults
- FakeSynchronizePort: Captured synchronize requests
"""

from .credentials import FakeCredentialStorePort
from .protocol import FakeRemoteProtocolPort, handles_response_body
from .store import FakeRecordStorePort
from .synchronize import FakeSynchronizePort

__all__ = [
    "FakeCredentialStorePort",
    "FakeRecordStorePort",
    "FakeRemoteProtocolPort",
    "FakeSynchronizePort",
    "handles_response_body",
]
