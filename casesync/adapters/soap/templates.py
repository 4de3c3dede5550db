"""SOAP message templates.

A message template is a named outbound SOAP definition: the endpoint, the
target namespace and one envelope per operation. Envelopes carry
"${Group.param}" placeholders that are substituted verbatim, without XML
escaping; parameters without a value render as empty elements.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from string import Template
from types import MappingProxyType

from casesync.core.errors import MessageTemplateNotFoundError

SM_MESSAGE_TEMPLATE = "x_g_cfm_vas.VAS SM Outbound"
SM_CREATE_OPERATION = "SmsStdCreatePersParmCase"


class EnvelopeTemplate(Template):
    """string.Template whose placeholders may contain dots."""

    idpattern = r"(?a:[_a-z][_a-z0-9.]*)"
    flags = re.IGNORECASE


class _BlankDefault(dict[str, str]):
    def __missing__(self, key: str) -> str:
        return ""


@dataclass(frozen=True)
class SoapOperation:
    """One operation of a message template."""

    name: str
    soap_action: str
    envelope: str


@dataclass(frozen=True)
class SoapMessageTemplate:
    """A named SOAP message definition."""

    name: str
    endpoint_url: str
    namespace: str
    operations: Mapping[str, SoapOperation] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Convert operations dict to read-only proxy."""
        if isinstance(self.operations, dict):
            object.__setattr__(
                self, "operations", MappingProxyType(self.operations)
            )

    def operation(self, name: str) -> SoapOperation:
        try:
            return self.operations[name]
        except KeyError:
            raise MessageTemplateNotFoundError(self.name, name) from None


def build_envelope(
    message: SoapMessageTemplate,
    operation: SoapOperation,
    parameters: Mapping[str, str],
) -> str:
    """Render the operation's envelope with the given parameters.

    Values are inserted as-is; they are expected to be plain strings
    and never markup.
    """
    values = _BlankDefault(parameters)
    values["namespace"] = message.namespace
    return EnvelopeTemplate(operation.envelope).substitute(values)


class MessageTemplateRegistry:
    """Lookup of message templates by name."""

    def __init__(self, templates: list[SoapMessageTemplate] | None = None):
        self._templates: dict[str, SoapMessageTemplate] = {}
        for template in templates or []:
            self.register(template)

    def register(self, template: SoapMessageTemplate) -> None:
        self._templates[template.name] = template

    def get(
        self, template_name: str, operation: str
    ) -> tuple[SoapMessageTemplate, SoapOperation]:
        """Resolve a (template, operation) pair.

        Raises:
            MessageTemplateNotFoundError: If either name is unknown.
        """
        template = self._templates.get(template_name)
        if template is None:
            raise MessageTemplateNotFoundError(template_name)
        return template, template.operation(operation)


_CREATE_ENVELOPE = """\
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/" xmlns:sm="${namespace}">
  <soapenv:Header/>
  <soapenv:Body>
    <sm:SmsStdCreatePersParmCase>
      <sm:CaseParams>
        <sm:caseStatus>${CaseParams.caseStatus}</sm:caseStatus>
        <sm:dateApplicantSignature>${CaseParams.dateApplicantSignature}</sm:dateApplicantSignature>
        <sm:investigationBasisRequested>${CaseParams.investigationBasisRequested}</sm:investigationBasisRequested>
        <sm:datePaperworkReceived>${CaseParams.datePaperworkReceived}</sm:datePaperworkReceived>
        <sm:casePriorityLevel>${CaseParams.casePriorityLevel}</sm:casePriorityLevel>
        <sm:pivRequested>${CaseParams.pivRequested}</sm:pivRequested>
        <sm:caseType>${CaseParams.caseType}</sm:caseType>
        <sm:requestingUserEmail>${CaseParams.requestingUserEmail}</sm:requestingUserEmail>
      </sm:CaseParams>
      <sm:PositionParams>
        <sm:positionSensitivity>${PositionParams.positionSensitivity}</sm:positionSensitivity>
        <sm:positionTitle>${PositionParams.positionTitle}</sm:positionTitle>
        <sm:employeeType>${PositionParams.employeeType}</sm:employeeType>
        <sm:employeeStatus>${PositionParams.employeeStatus}</sm:employeeStatus>
        <sm:organization>${PositionParams.organization}</sm:organization>
        <sm:contractInfo>
          <sm:contractorName>${contractInfo.contractorName}</sm:contractorName>
          <sm:activeStatus>${contractInfo.activeStatus}</sm:activeStatus>
          <sm:contractNumber>${contractInfo.contractNumber}</sm:contractNumber>
          <sm:contractStartDate>${contractInfo.contractStartDate}</sm:contractStartDate>
          <sm:contractEndDate>${contractInfo.contractEndDate}</sm:contractEndDate>
        </sm:contractInfo>
      </sm:PositionParams>
      <sm:PersonParams>
        <sm:firstName>${PersonParams.firstName}</sm:firstName>
        <sm:middleName>${PersonParams.middleName}</sm:middleName>
        <sm:lastName>${PersonParams.lastName}</sm:lastName>
        <sm:email>${PersonParams.email}</sm:email>
        <sm:birthCity>${PersonParams.birthCity}</sm:birthCity>
        <sm:birthState>${PersonParams.birthState}</sm:birthState>
        <sm:birthCountry>${PersonParams.birthCountry}</sm:birthCountry>
        <sm:citizenshipCountry>${PersonParams.citizenshipCountry}</sm:citizenshipCountry>
        <sm:birthDate>${PersonParams.birthDate}</sm:birthDate>
        <sm:ssn>${PersonParams.ssn}</sm:ssn>
        <sm:isSsnNotAvailable>${PersonParams.isSsnNotAvailable}</sm:isSsnNotAvailable>
      </sm:PersonParams>
    </sm:SmsStdCreatePersParmCase>
  </soapenv:Body>
</soapenv:Envelope>
"""


def sm_outbound_template(endpoint_url: str, namespace: str) -> SoapMessageTemplate:
    """The case-management create message with its single operation."""
    return SoapMessageTemplate(
        name=SM_MESSAGE_TEMPLATE,
        endpoint_url=endpoint_url,
        namespace=namespace,
        operations={
            SM_CREATE_OPERATION: SoapOperation(
                name=SM_CREATE_OPERATION,
                soap_action=f"{namespace.rstrip('/')}/{SM_CREATE_OPERATION}",
                envelope=_CREATE_ENVELOPE,
            ),
        },
    )
