"""Fake RecordStorePort implementation for testing."""

from datetime import datetime

from casesync.core.models import ApplicantRecord, CaseRecord, ExternalHandles
from casesync.core.ports import RecordStorePort


class FakeRecordStorePort(RecordStorePort):
    """In-memory applicant/case store for testing.

    Tracks all handle writes for test assertions.
    """

    def __init__(self):
        """Initialize with an empty store."""
        self.applicants: dict[str, ApplicantRecord] = {}
        self.cases: dict[str, CaseRecord] = {}
        self.write_handles_calls: list[tuple[str, str, ExternalHandles, bool]] = []
        self.find_case_calls: list[str] = []
        self.should_fail_write: bool = False
        self.fail_message: str = "Store unavailable"

    def add_applicant(self, applicant_id: str, **attributes: object) -> ApplicantRecord:
        """Seed an applicant with the given attribute fields."""
        applicant = ApplicantRecord(id=applicant_id, attributes=dict(attributes))
        self.applicants[applicant_id] = applicant
        return applicant

    def add_case(
        self,
        case_id: str,
        applicant_id: str,
        created_on: datetime,
        sm_position_handle: str = "",
        sm_case_handle: str = "",
        **attributes: object,
    ) -> CaseRecord:
        """Seed a case linked to an applicant."""
        case = CaseRecord(
            id=case_id,
            applicant_id=applicant_id,
            created_on=created_on,
            attributes=dict(attributes),
            sm_position_handle=sm_position_handle,
            sm_case_handle=sm_case_handle,
        )
        self.cases[case_id] = case
        return case

    async def get_applicant(self, applicant_id: str) -> ApplicantRecord | None:
        return self.applicants.get(applicant_id)

    async def find_case_for_applicant(self, applicant_id: str) -> CaseRecord | None:
        """Same selection rules as the SQLite store, over the in-memory cases."""
        self.find_case_calls.append(applicant_id)
        eligible = [
            case
            for case in self.cases.values()
            if case.applicant_id == applicant_id and not case.has_handles
        ]
        if not eligible:
            return None
        return max(eligible, key=lambda case: case.created_on)

    def read_field(self, record: ApplicantRecord | CaseRecord, name: str) -> str:
        return record.get(name)

    async def write_handles(
        self,
        applicant_id: str,
        case_id: str,
        handles: ExternalHandles,
        suppress_triggers: bool = True,
    ) -> None:
        """Record the write and apply it to both records."""
        self.write_handles_calls.append((applicant_id, case_id, handles, suppress_triggers))

        if self.should_fail_write:
            raise RuntimeError(self.fail_message)
        if not handles.is_complete:
            raise ValueError("Refusing to write incomplete handles")

        self.applicants[applicant_id].sm_person_handle = handles.person_handle
        self.cases[case_id].sm_position_handle = handles.position_handle
        self.cases[case_id].sm_case_handle = handles.case_handle

    def reset(self) -> None:
        """Reset all collected data."""
        self.applicants.clear()
        self.cases.clear()
        self.write_handles_calls.clear()
        self.find_case_calls.clear()
