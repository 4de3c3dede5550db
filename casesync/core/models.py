"""Domain models for the casesync integration service.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

PERSON_HANDLE_FIELD = "sm_person_handle"
POSITION_HANDLE_FIELD = "sm_position_handle"
CASE_HANDLE_FIELD = "sm_case_handle"


def render_field_value(value: Any) -> str:
    """Render a stored field value the way the record store exposes it.

    None renders as an empty string and booleans as "true"/"false".
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class ApplicantRecord:
    """A locally stored applicant.

    Attribute fields are schema-free; only the person handle is a
    first-class column because it is the one field the adapter writes.
    """

    id: str
    attributes: dict[str, Any] = field(default_factory=dict)
    sm_person_handle: str = ""
    created_on: datetime | None = None

    def get(self, name: str) -> str:
        """Read a field by name, returning "" when it does not exist."""
        if name == PERSON_HANDLE_FIELD:
            return self.sm_person_handle or ""
        return render_field_value(self.attributes.get(name))

    def snapshot(self) -> dict[str, str]:
        """Flat string view of every field, used by update listeners."""
        values = {name: render_field_value(v) for name, v in self.attributes.items()}
        values[PERSON_HANDLE_FIELD] = self.sm_person_handle or ""
        return values


@dataclass
class CaseRecord:
    """A locally stored case linked to one applicant."""

    id: str
    applicant_id: str
    created_on: datetime
    attributes: dict[str, Any] = field(default_factory=dict)
    sm_position_handle: str = ""
    sm_case_handle: str = ""

    def get(self, name: str) -> str:
        """Read a field by name, returning "" when it does not exist."""
        if name == POSITION_HANDLE_FIELD:
            return self.sm_position_handle or ""
        if name == CASE_HANDLE_FIELD:
            return self.sm_case_handle or ""
        if name == "applicant":
            return self.applicant_id
        return render_field_value(self.attributes.get(name))

    @property
    def has_handles(self) -> bool:
        """True when either external handle is already recorded."""
        return bool(self.sm_position_handle) or bool(self.sm_case_handle)


@dataclass(frozen=True)
class ExternalHandles:
    """Identifiers issued by the case-management system for one create call."""

    person_handle: str = ""
    position_handle: str = ""
    case_handle: str = ""

    @property
    def is_complete(self) -> bool:
        """True only when all three handles are non-empty."""
        return bool(self.person_handle and self.position_handle and self.case_handle)

    def missing(self) -> tuple[str, ...]:
        """Names of the handles that are empty, in wire spelling."""
        return tuple(
            name for name, value in self.to_dict().items() if not value
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "personHandle": self.person_handle,
            "positionHandle": self.position_handle,
            "caseHandle": self.case_handle,
        }


def is_synchronized(applicant: ApplicantRecord, case: CaseRecord) -> bool:
    """An applicant/case pair is synchronized iff all three handles are set."""
    return bool(
        applicant.sm_person_handle
        and case.sm_position_handle
        and case.sm_case_handle
    )


@dataclass(frozen=True)
class AuthProfile:
    """A named basic-auth credential profile."""

    id: str
    name: str
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class OutboundCall:
    """One remote operation: which message, which operation, what parameters."""

    message_template: str
    operation: str
    parameters: dict[str, str] | MappingProxyType[str, str]  # converted to proxy in __post_init__
    auth_profile: AuthProfile | None = None

    def __post_init__(self) -> None:
        """Convert parameters dict to read-only proxy."""
        if isinstance(self.parameters, dict):
            object.__setattr__(
                self, "parameters", MappingProxyType(self.parameters)
            )


@dataclass(frozen=True)
class RemoteResponse:
    """Raw result of a remote call."""

    status_code: int
    body: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299


class SyncOutcome(Enum):
    """How one synchronize invocation ended."""

    SUCCESS = "success"
    NO_CASE_FOUND = "no_case_found"
    AUTH_PROFILE_MISSING = "auth_profile_missing"
    TRANSPORT_FAULT = "transport_fault"
    PROTOCOL_FAILURE = "protocol_failure"
    INCOMPLETE_RESPONSE = "incomplete_response"


class SyncState(Enum):
    """Lifecycle states of an applicant/case pair within one invocation.

    State transitions:
    - UNSYNCED → CASE_RESOLVED (eligible case found)
    - UNSYNCED → NO_CASE_FOUND (terminal no-op)
    - CASE_RESOLVED → CALL_FAILED (terminal for this invocation)
    - CASE_RESOLVED → INCOMPLETE_RESPONSE (terminal for this invocation)
    - CASE_RESOLVED → SYNCED (all three handles persisted)
    """

    UNSYNCED = "unsynced"
    CASE_RESOLVED = "case_resolved"
    CALL_FAILED = "call_failed"
    INCOMPLETE_RESPONSE = "incomplete_response"
    SYNCED = "synced"
    NO_CASE_FOUND = "no_case_found"


_TERMINAL_STATES: Mapping[SyncOutcome, SyncState] = MappingProxyType(
    {
        SyncOutcome.SUCCESS: SyncState.SYNCED,
        SyncOutcome.NO_CASE_FOUND: SyncState.NO_CASE_FOUND,
        SyncOutcome.AUTH_PROFILE_MISSING: SyncState.CALL_FAILED,
        SyncOutcome.TRANSPORT_FAULT: SyncState.CALL_FAILED,
        SyncOutcome.PROTOCOL_FAILURE: SyncState.CALL_FAILED,
        SyncOutcome.INCOMPLETE_RESPONSE: SyncState.INCOMPLETE_RESPONSE,
    }
)


@dataclass(frozen=True)
class SyncResult:
    """Structured result of one synchronize invocation."""

    ok: bool
    http_status: int
    outcome: SyncOutcome
    applicant_id: str
    case_id: str | None = None
    handles: ExternalHandles | None = None
    body: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate that ok agrees with the outcome."""
        if self.ok != (self.outcome is SyncOutcome.SUCCESS):
            raise ValueError(
                f"ok={self.ok} is inconsistent with outcome {self.outcome.value}"
            )

    @property
    def state(self) -> SyncState:
        """Terminal state reached by this invocation."""
        return _TERMINAL_STATES[self.outcome]

    def to_dict(self) -> dict[str, Any]:
        """Wire shape returned to the trigger and to webhook callers."""
        data: dict[str, Any] = {"ok": self.ok, "httpStatus": self.http_status}
        if self.handles is not None:
            data["handles"] = self.handles.to_dict()
        if self.body is not None:
            data["body"] = self.body
        if self.error is not None:
            data["error"] = self.error
        return data
