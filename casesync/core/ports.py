"""Port interfaces for the casesync integration service.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - RecordStorePort: Read applicants and cases, persist handles
   - CredentialStorePort: Look up authentication profiles by name
   - RemoteProtocolPort: Execute the outbound create operation

2. **Driving Ports** (adapters/external systems call into core)
   - SynchronizePort: Single entry point used by the transition trigger
     and the webhook receiver
"""

from abc import ABC, abstractmethod

from .models import (
    ApplicantRecord,
    AuthProfile,
    CaseRecord,
    ExternalHandles,
    OutboundCall,
    RemoteResponse,
    SyncResult,
)


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class RecordStorePort(ABC):
    """Port for the local store holding applicants and cases.

    The synchronizer only reads attribute fields and writes the three
    handle fields. Implementations must handle:
    - Tolerant field reads (unknown field names read as "")
    - Atomic handle writes across both records
    - Suppressing update listeners for handle writes on request
    """

    @abstractmethod
    async def get_applicant(self, applicant_id: str) -> ApplicantRecord | None:
        """Retrieve an applicant by identifier.

        Args:
            applicant_id: Identifier of the applicant record.

        Returns:
            The applicant, or None if it does not exist.

        Raises:
            Exception: If the store is unavailable.
        """

    @abstractmethod
    async def find_case_for_applicant(self, applicant_id: str) -> CaseRecord | None:
        """Select the case to synchronize for an applicant.

        Only cases that reference the applicant and carry neither a
        position handle nor a case handle are eligible. Among those the
        most recently created one wins.

        Args:
            applicant_id: Identifier of the applicant record.

        Returns:
            The eligible case, or None when there is none. None is not an
            error condition.

        Raises:
            Exception: If the store is unavailable.
        """

    @abstractmethod
    def read_field(self, record: ApplicantRecord | CaseRecord, name: str) -> str:
        """Read a field from a loaded record as a string.

        Args:
            record: Applicant or case previously returned by this store.
            name: Field name. Unknown names are not an error.

        Returns:
            The field value rendered as a string, "" when absent or empty.
        """

    @abstractmethod
    async def write_handles(
        self,
        applicant_id: str,
        case_id: str,
        handles: ExternalHandles,
        suppress_triggers: bool = True,
    ) -> None:
        """Persist all three handles in one unit of work.

        The person handle goes onto the applicant, the position and case
        handles onto the case.

        Args:
            applicant_id: Applicant receiving the person handle.
            case_id: Case receiving the position and case handles.
            handles: Complete handle set.
            suppress_triggers: When True the write does not notify update
                listeners, so the transition trigger is not re-fired.

        Raises:
            ValueError: If handles are incomplete or either record is missing.
                Nothing is written in that case.
            Exception: If the store is unavailable.
        """


class CredentialStorePort(ABC):
    """Port for looking up authentication profiles by human-readable name."""

    @abstractmethod
    async def find_profile(self, name: str) -> AuthProfile | None:
        """Look up a profile by name.

        Args:
            name: Profile name, e.g. "VAS SM Dev Basic Auth Creds".

        Returns:
            The profile, or None if no profile has that name.
        """


class RemoteProtocolPort(ABC):
    """Port for executing an outbound operation against the external system.

    Implementations must handle:
    - Resolving the message template and operation
    - Applying the authentication profile when one is given
    - A bounded transport timeout
    """

    @abstractmethod
    async def execute(self, call: OutboundCall) -> RemoteResponse:
        """Execute the call and wait for the complete response.

        Args:
            call: Message template, operation, parameters and auth profile.

        Returns:
            Status code and raw response body, whatever the status.

        Raises:
            TransportFault: If no HTTP response could be obtained.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""


# ============================================================================
# DRIVING PORTS (Adapters/external systems call into core)
# ============================================================================


class SynchronizePort(ABC):
    """Port for synchronizing one applicant with the external system.

    Implementations live in the core (synchronizer.py). The transition
    trigger and the webhook receiver call this method.
    """

    @abstractmethod
    async def synchronize(self, applicant_id: str) -> SyncResult:
        """Create person, position and case externally and record the handles.

        Safe to invoke redundantly: already synchronized cases are never
        selected, so a repeated call ends as NO_CASE_FOUND.

        Args:
            applicant_id: Identifier of the applicant record.

        Returns:
            SyncResult describing the outcome. Protocol failures are
            reported through the result, not raised.

        Raises:
            Exception: Only if the record store fails.
        """
