"""Translation of local applicant and case fields into create parameters.

The payload is a tree of typed dataclasses; the flat string-keyed mapping
the remote operation expects is only produced by CreatePayload.to_wire().
"""

from collections.abc import Callable
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any

FieldReader = Callable[[str], str]

TIER_CODES = MappingProxyType(
    {
        "tier_1": "T1",
        "tier_2": "T2",
        "tier_3": "T3",
        "tier_4": "T4",
        "tier_5": "T5",
    }
)

EMAIL_SOURCE_FIELDS = ("agency_email", "work_email", "personal_address")

DEFAULT_CASE_PRIORITY = "None"
DEFAULT_CASE_TYPE = "Suitability"
DEFAULT_EMPLOYEE_TYPE = "CONTRACTOR"
DEFAULT_EMPLOYEE_STATUS = "active"
DEFAULT_ORGANIZATION = "CMS"
CONTRACT_ACTIVE_STATUS = "Active"
DEFAULT_SSN_NOT_AVAILABLE = "false"


def map_tier(value: str) -> str:
    """Translate an investigation tier choice into its short code.

    Unknown values pass through unchanged, so already-mapped codes map
    to themselves.
    """
    if not value:
        return ""
    return TIER_CODES.get(value, value)


def yes_no(value: Any) -> str:
    """Collapse a boolean-ish value into "Yes" or "No"."""
    if value is True or value == "true" or value == "1":
        return "Yes"
    return "No"


def first_non_empty(*values: str) -> str:
    """Return the first truthy value, or "" when there is none."""
    for value in values:
        if value:
            return value
    return ""


def select_email(agency_email: str, work_email: str, personal_email: str) -> str:
    """Choose the person email in strict priority order, unvalidated."""
    return first_non_empty(agency_email, work_email, personal_email)


def _param(wire_name: str) -> Any:
    return field(default="", metadata={"wire": wire_name})


@dataclass(frozen=True)
class CaseParams:
    case_status: str = _param("caseStatus")
    date_applicant_signature: str = _param("dateApplicantSignature")
    investigation_basis_requested: str = _param("investigationBasisRequested")
    date_paperwork_received: str = _param("datePaperworkReceived")
    case_priority_level: str = _param("casePriorityLevel")
    piv_requested: str = _param("pivRequested")
    case_type: str = _param("caseType")
    requesting_user_email: str = _param("requestingUserEmail")


@dataclass(frozen=True)
class PositionParams:
    position_sensitivity: str = _param("positionSensitivity")
    position_title: str = _param("positionTitle")
    employee_type: str = _param("employeeType")
    employee_status: str = _param("employeeStatus")
    organization: str = _param("organization")


@dataclass(frozen=True)
class ContractInfo:
    """Contract details; the remote schema nests these under PositionParams."""

    contractor_name: str = _param("contractorName")
    active_status: str = _param("activeStatus")
    contract_number: str = _param("contractNumber")
    contract_start_date: str = _param("contractStartDate")
    contract_end_date: str = _param("contractEndDate")


@dataclass(frozen=True)
class PersonParams:
    first_name: str = _param("firstName")
    middle_name: str = _param("middleName")
    last_name: str = _param("lastName")
    email: str = _param("email")
    birth_city: str = _param("birthCity")
    birth_state: str = _param("birthState")
    birth_country: str = _param("birthCountry")
    citizenship_country: str = _param("citizenshipCountry")
    birth_date: str = _param("birthDate")
    ssn: str = _param("ssn")
    is_ssn_not_available: str = _param("isSsnNotAvailable")


@dataclass(frozen=True)
class CreatePayload:
    """Parameters for one person/position/case create call."""

    case: CaseParams
    position: PositionParams
    contract: ContractInfo
    person: PersonParams

    def to_wire(self) -> dict[str, str]:
        """Flatten into "<Group>.<param>" keys with string values."""
        wire: dict[str, str] = {}
        for prefix, group in (
            ("CaseParams", self.case),
            ("PositionParams", self.position),
            ("contractInfo", self.contract),
            ("PersonParams", self.person),
        ):
            for f in fields(group):
                wire[f"{prefix}.{f.metadata['wire']}"] = getattr(group, f.name)
        return wire


def build_create_payload(
    read_case: FieldReader, read_applicant: FieldReader
) -> CreatePayload:
    """Build the create payload from two tolerant field readers.

    Args:
        read_case: Reads a case field by name, "" when absent.
        read_applicant: Reads an applicant field by name, "" when absent.
    """
    case = CaseParams(
        case_status=read_case("case_status"),
        date_applicant_signature=read_case("date_of_applicants_signature"),
        investigation_basis_requested=map_tier(
            read_case("investigation_basis_requested")
        ),
        date_paperwork_received=read_case("date_received"),
        case_priority_level=read_case("case_priority_level") or DEFAULT_CASE_PRIORITY,
        piv_requested=yes_no(read_case("badge_requested")),
        case_type=read_case("case_type") or DEFAULT_CASE_TYPE,
        requesting_user_email=read_applicant("agency_email"),
    )

    position = PositionParams(
        position_sensitivity=read_case("position_sensitivity"),
        position_title=read_case("position_title"),
        employee_type=read_case("employee_type") or DEFAULT_EMPLOYEE_TYPE,
        employee_status=read_applicant("employee_status") or DEFAULT_EMPLOYEE_STATUS,
        organization=read_case("organization") or DEFAULT_ORGANIZATION,
    )

    contract = ContractInfo(
        contractor_name=read_case("contractor_company"),
        active_status=CONTRACT_ACTIVE_STATUS,
        contract_number=first_non_empty(
            read_case("contract_name"), read_case("contract")
        ),
        contract_start_date=first_non_empty(
            read_case("contract_start_date"), read_applicant("contract_start_date")
        ),
        contract_end_date=first_non_empty(
            read_case("contract_end_date"), read_applicant("contract_end_date")
        ),
    )

    person = PersonParams(
        first_name=read_applicant("legal_first_name"),
        middle_name=read_applicant("middle_name"),
        last_name=read_applicant("legal_last_name"),
        email=select_email(*(read_applicant(name) for name in EMAIL_SOURCE_FIELDS)),
        birth_city=read_applicant("birth_city"),
        birth_state=read_applicant("birth_state"),
        birth_country=read_applicant("birth_country"),
        citizenship_country=read_applicant("citizenship_country"),
        birth_date=read_applicant("birth_date"),
        ssn=read_applicant("ssn"),
        is_ssn_not_available=(
            read_applicant("is_ssn_not_available") or DEFAULT_SSN_NOT_AVAILABLE
        ),
    )

    return CreatePayload(case=case, position=position, contract=contract, person=person)
