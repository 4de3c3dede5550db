"""HTTP server adapter for the webhook receiver.

Provides a simple HTTP server using Python's built-in http.server module,
bridged to the application's asyncio event loop.

Supports optional API key authentication via the Authorization header
(Bearer token) or X-API-Key.
"""

import asyncio
import hmac
import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Coroutine

from casesync.adapters.webhook.receiver import WebhookReceiver

logger = logging.getLogger(__name__)

MAX_BODY_SIZE = 1024 * 1024


def is_authorized(
    headers: Any, api_key: str | None, require_auth: bool
) -> bool:
    """Check request headers against the configured API key.

    Supports two authentication methods:
    1. Authorization: Bearer <api_key>
    2. X-API-Key: <api_key>
    """
    if not require_auth:
        return True
    if not api_key:
        return False

    auth_header = headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return hmac.compare_digest(auth_header[7:], api_key)

    api_key_header = headers.get("X-API-Key", "")
    if api_key_header:
        return hmac.compare_digest(api_key_header, api_key)

    return False


def make_webhook_handler(
    webhook_receiver: WebhookReceiver,
    event_loop: asyncio.AbstractEventLoop,
    api_key: str | None,
    require_auth: bool,
    request_timeout: float,
) -> type[BaseHTTPRequestHandler]:
    """Create a handler class with closure-captured dependencies.

    Args:
        webhook_receiver: Receiver for webhook operations
        event_loop: Event loop running the application's coroutines
        api_key: Optional API key for authentication
        require_auth: Whether authentication is required
        request_timeout: Seconds to wait for a synchronization to finish

    Returns:
        A WebhookHTTPHandler class configured with the provided dependencies
    """

    class WebhookHTTPHandler(BaseHTTPRequestHandler):
        """HTTP request handler for webhook endpoints."""

        def do_POST(self) -> None:
            """Handle POST requests."""
            content_length = int(self.headers.get("Content-Length", 0))
            if content_length > MAX_BODY_SIZE:
                self.send_error(413, "Request body too large")
                return

            # Consume the body before any early reply so the socket closes cleanly
            body = self.rfile.read(content_length) if content_length > 0 else b""

            if not is_authorized(self.headers, api_key, require_auth):
                self.send_error(401, "Unauthorized: invalid or missing API key")
                return

            try:
                data = json.loads(body) if body else {}
            except json.JSONDecodeError:
                self.send_error(400, "Invalid JSON body")
                return

            if self.path == "/api/synchronize":
                applicant_id = data.get("applicant_id") if isinstance(data, dict) else None
                if not applicant_id or not isinstance(applicant_id, str):
                    self.send_error(400, "Missing applicant_id")
                    return
                self._run_async(
                    webhook_receiver.handle_synchronize_request(applicant_id)
                )
            elif self.path == "/health":
                self._send_response({"status": "healthy"})
            else:
                self.send_error(404, "Not found")

        def do_GET(self) -> None:
            """Handle GET requests. Health check is public."""
            if self.path == "/health":
                self._send_response({"status": "healthy"})
            else:
                self.send_error(404, "Not found")

        def _run_async(self, coro: Coroutine[Any, Any, dict[str, Any]]) -> None:
            """Run a coroutine on the application loop and send its result."""
            future = asyncio.run_coroutine_threadsafe(coro, event_loop)
            try:
                result = future.result(timeout=request_timeout)
            except Exception as e:
                logger.error(f"Error handling webhook request: {e}", exc_info=True)
                # Return generic error to client without details
                self.send_error(500, "Internal server error")
                return
            self._send_response(result)

        def _send_response(self, data: dict[str, Any]) -> None:
            """Send JSON response."""
            payload = json.dumps(data).encode()
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        def log_message(self, format: str, *args: Any) -> None:
            """Log HTTP request."""
            logger.debug(f"HTTP {self.client_address[0]}: {format % args}")

    return WebhookHTTPHandler


class WebhookHTTPServer:
    """Webhook HTTP server adapter.

    Exposes POST /api/synchronize and GET /health.
    """

    def __init__(
        self,
        webhook_receiver: WebhookReceiver,
        host: str = "0.0.0.0",
        port: int = 8080,
        api_key: str | None = None,
        require_auth: bool = False,
        request_timeout: float = 60.0,
    ):
        """Initialize the HTTP server.

        Args:
            webhook_receiver: WebhookReceiver instance to handle requests.
            host: Host to listen on (default 0.0.0.0).
            port: Port to listen on (default 8080).
            api_key: Optional API key for authentication.
            require_auth: Whether to require authentication (default False).
            request_timeout: Seconds to wait for each synchronization.

        Raises:
            ValueError: If require_auth=True but no API key is provided.
        """
        if require_auth and not api_key:
            raise ValueError(
                "Webhook server configured with require_auth=True but "
                "no API key provided"
            )
        self.webhook_receiver = webhook_receiver
        self.host = host
        self.port = port
        self.api_key = api_key
        self.require_auth = require_auth
        self.request_timeout = request_timeout
        self.server: HTTPServer | None = None
        self._server_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the HTTP server."""
        if self.require_auth:
            logger.info(
                f"Starting webhook HTTP server on {self.host}:{self.port} "
                "(with API key authentication)"
            )
        else:
            logger.info(f"Starting webhook HTTP server on {self.host}:{self.port}")

        handler_class = make_webhook_handler(
            webhook_receiver=self.webhook_receiver,
            event_loop=asyncio.get_running_loop(),
            api_key=self.api_key,
            require_auth=self.require_auth,
            request_timeout=self.request_timeout,
        )

        self.server = HTTPServer((self.host, self.port), handler_class)
        self._server_task = asyncio.create_task(self._run_server())
        logger.info("Webhook HTTP server started")

    async def _run_server(self) -> None:
        """Run the blocking server loop in a worker thread."""
        if not self.server:
            return

        try:
            await asyncio.to_thread(self.server.serve_forever)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Webhook HTTP server error: {e}", exc_info=True)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self.server:
            self.server.shutdown()
            self.server.server_close()
        if self._server_task:
            self._server_task.cancel()
            try:
                await self._server_task
            except asyncio.CancelledError:
                pass
        logger.info("Webhook HTTP server stopped")
