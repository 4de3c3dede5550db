"""Fake RemoteProtocolPort implementation for testing."""

from casesync.core.errors import TransportFault
from casesync.core.models import OutboundCall, RemoteResponse
from casesync.core.ports import RemoteProtocolPort


def handles_response_body(
    person: str = "P1",
    position: str = "PO1",
    case: str = "C1",
) -> str:
    """A namespaced create response carrying the given handles.

    An empty argument omits that response element entirely.
    """
    parts = []
    if person:
        parts.append(f"<ns2:PersonResponse><ns2:personHandle>{person}</ns2:personHandle></ns2:PersonResponse>")
    if position:
        parts.append(f"<ns2:PositionResponse><ns2:positionHandle>{position}</ns2:positionHandle></ns2:PositionResponse>")
    if case:
        parts.append(f"<ns2:CaseResponse><ns2:caseHandle>{case}</ns2:caseHandle></ns2:CaseResponse>")
    return (
        '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/" '
        'xmlns:ns2="http://sm.example.gov/sms/std">'
        "<soap:Body><ns2:SmsStdCreatePersParmCaseResponse>"
        + "".join(parts)
        + "</ns2:SmsStdCreatePersParmCaseResponse></soap:Body></soap:Envelope>"
    )


class FakeRemoteProtocolPort(RemoteProtocolPort):
    """Canned remote responses; captures every executed call."""

    def __init__(self, response: RemoteResponse | None = None):
        self.response = response or RemoteResponse(
            status_code=200, body=handles_response_body()
        )
        self.calls: list[OutboundCall] = []
        self.fault: Exception | None = None
        self.closed = False

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def last_call(self) -> OutboundCall | None:
        return self.calls[-1] if self.calls else None

    def respond_with(self, status_code: int, body: str) -> None:
        self.response = RemoteResponse(status_code=status_code, body=body)

    def fail_with(self, message: str = "Connection refused") -> None:
        self.fault = TransportFault(message)

    async def execute(self, call: OutboundCall) -> RemoteResponse:
        self.calls.append(call)
        if self.fault is not None:
            raise self.fault
        return self.response

    async def close(self) -> None:
        self.closed = True
