"""Synchronization of an applicant and its case into the external system.

This module orchestrates one create call end to end: resolve the case,
translate fields, execute the remote operation, parse the handles and
persist them. It talks to the outside world only through ports.
"""

import logging
from functools import partial

from .models import (
    ApplicantRecord,
    AuthProfile,
    CaseRecord,
    ExternalHandles,
    OutboundCall,
    SyncOutcome,
    SyncResult,
)
from .ports import (
    CredentialStorePort,
    RecordStorePort,
    RemoteProtocolPort,
    SynchronizePort,
)
from .response import parse_handles
from .translation import CreatePayload, build_create_payload

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_TEMPLATE = "x_g_cfm_vas.VAS SM Outbound"
DEFAULT_OPERATION = "SmsStdCreatePersParmCase"
DEFAULT_AUTH_PROFILE = "VAS SM Dev Basic Auth Creds"


class Synchronizer(SynchronizePort):
    """Creates person, position and case records in the external system.

    Every failure class is reported through the returned SyncResult and
    none is retried here; callers re-trigger the whole flow if needed.
    """

    def __init__(
        self,
        store: RecordStorePort,
        credentials: CredentialStorePort,
        protocol: RemoteProtocolPort,
        message_template: str = DEFAULT_MESSAGE_TEMPLATE,
        operation: str = DEFAULT_OPERATION,
        auth_profile_name: str = DEFAULT_AUTH_PROFILE,
        require_auth: bool = False,
    ):
        """Initialize the synchronizer.

        Args:
            store: Record store holding applicants and cases.
            credentials: Credential store used to resolve the auth profile.
            protocol: Remote protocol adapter executing the operation.
            message_template: Name of the outbound message template.
            operation: Name of the operation within the template.
            auth_profile_name: Name of the authentication profile.
            require_auth: When False a missing profile is logged and the
                call proceeds unauthenticated. When True the call is not made.
        """
        self.store = store
        self.credentials = credentials
        self.protocol = protocol
        self.message_template = message_template
        self.operation = operation
        self.auth_profile_name = auth_profile_name
        self.require_auth = require_auth

    async def synchronize(self, applicant_id: str) -> SyncResult:
        """Run resolve → translate → call → parse → persist for one applicant."""
        applicant = await self.store.get_applicant(applicant_id)
        case = None
        if applicant is not None:
            case = await self.store.find_case_for_applicant(applicant_id)

        if applicant is None or case is None:
            logger.warning(
                f"No case found for applicant {applicant_id}",
                extra={"applicant_id": applicant_id},
            )
            return SyncResult(
                ok=False,
                http_status=0,
                outcome=SyncOutcome.NO_CASE_FOUND,
                applicant_id=applicant_id,
                error="No related case found.",
            )

        profile = await self._resolve_auth_profile(applicant, case)
        if profile is None and self.require_auth:
            logger.error(
                f"Authentication profile {self.auth_profile_name!r} is required "
                f"but was not found. Applicant={applicant.id} Case={case.id}",
                extra={"applicant_id": applicant.id, "case_id": case.id},
            )
            return SyncResult(
                ok=False,
                http_status=0,
                outcome=SyncOutcome.AUTH_PROFILE_MISSING,
                applicant_id=applicant.id,
                case_id=case.id,
                error=f"Authentication profile not found: {self.auth_profile_name}",
            )

        payload = self.build_payload(applicant, case)
        call = OutboundCall(
            message_template=self.message_template,
            operation=self.operation,
            parameters=payload.to_wire(),
            auth_profile=profile,
        )

        try:
            response = await self.protocol.execute(call)
        except Exception as e:
            logger.error(
                f"Remote execute raised an exception: {e}. "
                f"Applicant={applicant.id} Case={case.id}",
                exc_info=True,
                extra={"applicant_id": applicant.id, "case_id": case.id},
            )
            return SyncResult(
                ok=False,
                http_status=0,
                outcome=SyncOutcome.TRANSPORT_FAULT,
                applicant_id=applicant.id,
                case_id=case.id,
                error=str(e),
            )

        if not response.is_success:
            logger.error(
                f"Create failed. HTTP {response.status_code} "
                f"Applicant={applicant.id} Case={case.id}",
                extra={
                    "applicant_id": applicant.id,
                    "case_id": case.id,
                    "http_status": response.status_code,
                    "response": response.body,
                },
            )
            return SyncResult(
                ok=False,
                http_status=response.status_code,
                outcome=SyncOutcome.PROTOCOL_FAILURE,
                applicant_id=applicant.id,
                case_id=case.id,
                body=response.body,
            )

        handles = parse_handles(response.body)
        if not handles.is_complete:
            logger.error(
                f"Call succeeded but handles are missing: {', '.join(handles.missing())}. "
                f"Applicant={applicant.id} Case={case.id}",
                extra={
                    "applicant_id": applicant.id,
                    "case_id": case.id,
                    "http_status": response.status_code,
                    "response": response.body,
                },
            )
            return SyncResult(
                ok=False,
                http_status=response.status_code,
                outcome=SyncOutcome.INCOMPLETE_RESPONSE,
                applicant_id=applicant.id,
                case_id=case.id,
                handles=handles,
                body=response.body,
            )

        await self._write_handles(applicant, case, handles)

        logger.info(
            f"Created external records. Applicant={applicant.id} Case={case.id} "
            f"personHandle={handles.person_handle} "
            f"positionHandle={handles.position_handle} "
            f"caseHandle={handles.case_handle}",
            extra={"applicant_id": applicant.id, "case_id": case.id},
        )
        return SyncResult(
            ok=True,
            http_status=response.status_code,
            outcome=SyncOutcome.SUCCESS,
            applicant_id=applicant.id,
            case_id=case.id,
            handles=handles,
        )

    def build_payload(self, applicant: ApplicantRecord, case: CaseRecord) -> CreatePayload:
        """Translate the applicant/case pair through the store's field reader."""
        return build_create_payload(
            read_case=partial(self.store.read_field, case),
            read_applicant=partial(self.store.read_field, applicant),
        )

    async def _resolve_auth_profile(
        self, applicant: ApplicantRecord, case: CaseRecord
    ) -> AuthProfile | None:
        profile = await self.credentials.find_profile(self.auth_profile_name)
        if profile is None and not self.require_auth:
            logger.warning(
                f"Auth profile not found: {self.auth_profile_name}. "
                f"Proceeding without authentication. "
                f"Applicant={applicant.id} Case={case.id}",
                extra={"applicant_id": applicant.id, "case_id": case.id},
            )
        return profile

    async def _write_handles(
        self, applicant: ApplicantRecord, case: CaseRecord, handles: ExternalHandles
    ) -> None:
        try:
            await self.store.write_handles(
                applicant.id, case.id, handles, suppress_triggers=True
            )
        except Exception as e:
            logger.error(
                f"Failed to persist handles after successful create: {e}. "
                f"Applicant={applicant.id} Case={case.id} "
                f"handles={handles.to_dict()}",
                exc_info=True,
                extra={"applicant_id": applicant.id, "case_id": case.id},
            )
            raise
