"""HTTP webhook receiver for external triggers.

Lets an external system request synchronization of an applicant by
identifier alone. Forwards requests to the SynchronizePort.
"""

import logging
from typing import Any

from casesync.core.ports import SynchronizePort

logger = logging.getLogger(__name__)


class WebhookReceiver:
    """Translates webhook requests into synchronize calls."""

    def __init__(self, synchronize_port: SynchronizePort):
        """Initialize the webhook receiver.

        Args:
            synchronize_port: SynchronizePort implementation to invoke.
        """
        self.synchronize_port = synchronize_port

    async def handle_synchronize_request(self, applicant_id: str) -> dict[str, Any]:
        """Handle a request to synchronize one applicant.

        Args:
            applicant_id: Identifier of the applicant record.

        Returns:
            Dictionary with the operation name, the outcome and the
            result in its wire shape.

        Raises:
            Exception: If the record store fails.
        """
        result = await self.synchronize_port.synchronize(applicant_id)
        logger.info(
            "Synchronization requested via webhook",
            extra={
                "applicant_id": applicant_id,
                "case_id": result.case_id,
                "outcome": result.outcome.value,
            },
        )
        return {
            "status": "success" if result.ok else "failed",
            "operation": "synchronize",
            "outcome": result.outcome.value,
            "result": result.to_dict(),
        }
