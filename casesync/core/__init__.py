"""Core domain logic for the casesync integration service.

This package contains zero external dependencies and represents
the pure business logic of the application. All adapters and
external integrations are handled by the adapters package.
"""

from .errors import MessageTemplateNotFoundError, TransportFault
from .models import (
    ApplicantRecord,
    AuthProfile,
    CaseRecord,
    ExternalHandles,
    OutboundCall,
    RemoteResponse,
    SyncOutcome,
    SyncResult,
    SyncState,
)

__all__ = [
    "ApplicantRecord",
    "AuthProfile",
    "CaseRecord",
    "ExternalHandles",
    "MessageTemplateNotFoundError",
    "OutboundCall",
    "RemoteResponse",
    "SyncOutcome",
    "SyncResult",
    "SyncState",
    "TransportFault",
]
