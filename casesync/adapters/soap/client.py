"""SOAP protocol adapter.

Implements RemoteProtocolPort by rendering a message template and posting
it with httpx. HTTP basic auth is applied from the call's auth profile.
"""

import logging
from typing import Any

import httpx

from casesync.core.errors import TransportFault
from casesync.core.models import OutboundCall, RemoteResponse
from casesync.core.ports import RemoteProtocolPort

from .templates import MessageTemplateRegistry, build_envelope

logger = logging.getLogger(__name__)


class SoapProtocolAdapter(RemoteProtocolPort):
    """Executes SOAP operations over HTTP."""

    def __init__(
        self,
        templates: MessageTemplateRegistry,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the SOAP adapter.

        Args:
            templates: Registry resolving message template and operation names.
            timeout_seconds: Upper bound on every phase of the HTTP exchange.
            transport: Optional httpx transport, e.g. httpx.MockTransport.
        """
        self.templates = templates
        self.timeout_seconds = timeout_seconds
        self.client = httpx.AsyncClient(
            timeout=timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "SoapProtocolAdapter":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the httpx client and clean up resources."""
        await self.client.aclose()

    async def execute(self, call: OutboundCall) -> RemoteResponse:
        """Render the envelope for the call and post it.

        Raises:
            MessageTemplateNotFoundError: If the template or operation is unknown.
            TransportFault: If the HTTP exchange fails or times out.
        """
        message, operation = self.templates.get(call.message_template, call.operation)
        envelope = build_envelope(message, operation, call.parameters)

        auth = None
        if call.auth_profile is not None:
            auth = httpx.BasicAuth(call.auth_profile.username, call.auth_profile.password)

        logger.debug(
            f"POST {message.endpoint_url} operation={operation.name} "
            f"authenticated={auth is not None}"
        )

        try:
            response = await self.client.post(
                message.endpoint_url,
                content=envelope.encode("utf-8"),
                headers={
                    "Content-Type": "text/xml; charset=utf-8",
                    "SOAPAction": f'"{operation.soap_action}"',
                },
                auth=auth,
            )
        except httpx.HTTPError as e:
            raise TransportFault(str(e) or type(e).__name__) from e

        return RemoteResponse(status_code=response.status_code, body=response.text)
