"""Composition root for the casesync integration service.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Trigger registration on the record store
- Entry point selection (webhook server or one-shot synchronization)
"""

import asyncio
import json
import logging
import sys

from casesync.adapters.credentials.file import FileCredentialStore
from casesync.adapters.soap.client import SoapProtocolAdapter
from casesync.adapters.soap.templates import (
    MessageTemplateRegistry,
    sm_outbound_template,
)
from casesync.adapters.store.sqlite import SQLiteRecordStore
from casesync.adapters.webhook.http_server import WebhookHTTPServer
from casesync.adapters.webhook.receiver import WebhookReceiver
from casesync.config import Settings, load_settings
from casesync.core.synchronizer import Synchronizer
from casesync.core.trigger import TransitionTrigger

logger = logging.getLogger(__name__)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = (
            '{"time": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}'
        )
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )


def build_synchronizer(
    settings: Settings,
    store: SQLiteRecordStore,
) -> tuple[Synchronizer, SoapProtocolAdapter]:
    """Wire the synchronizer and the adapters it drives.

    Raises:
        MessageTemplateNotFoundError: If the configured template or
            operation is not registered.
    """
    templates = MessageTemplateRegistry(
        [sm_outbound_template(settings.sm_endpoint_url, settings.sm_namespace)]
    )
    # Fail at startup, not on the first trigger
    templates.get(settings.sm_message_template, settings.sm_operation)

    protocol = SoapProtocolAdapter(
        templates=templates,
        timeout_seconds=settings.sm_timeout_seconds,
    )
    credentials = FileCredentialStore(settings.credentials_file)

    synchronizer = Synchronizer(
        store=store,
        credentials=credentials,
        protocol=protocol,
        message_template=settings.sm_message_template,
        operation=settings.sm_operation,
        auth_profile_name=settings.sm_auth_profile,
        require_auth=settings.sm_require_auth,
    )
    return synchronizer, protocol


async def bootstrap(applicant_ids: list[str] | None = None) -> int:
    """Load configuration, wire adapters, and start the application.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate adapters with configuration
    4. Initialize core services and register the trigger
    5. Select and start run mode

    Args:
        applicant_ids: Applicants to synchronize in "once" mode.

    Returns:
        Process exit code: 0 when every requested synchronization
        succeeded (or the server shut down cleanly), 1 otherwise.
    """
    settings = load_settings()

    configure_logging(settings.log_level, settings.log_format)
    logger.info("Loading casesync integration service...")

    store = SQLiteRecordStore(db_path=settings.store_sqlite_path)
    logger.info(f"Record store initialized: {settings.store_sqlite_path}")

    synchronizer, protocol = build_synchronizer(settings, store)

    trigger = TransitionTrigger(
        synchronizer=synchronizer,
        field=settings.trigger_field,
        mode=settings.trigger_mode,
    )
    store.add_update_listener(trigger.on_applicant_saved)
    logger.info(
        f"Transition trigger registered on {settings.trigger_field!r} "
        f"({settings.trigger_mode} mode)"
    )

    logger.info(f"Starting in {settings.run_mode} mode...")

    try:
        if settings.run_mode == "once":
            if not applicant_ids:
                logger.error("No applicant identifiers given for once mode")
                return 1
            exit_code = 0
            for applicant_id in applicant_ids:
                result = await trigger.invoke(applicant_id)
                print(json.dumps({"applicant_id": applicant_id, **result.to_dict()}))
                if not result.ok:
                    exit_code = 1
            return exit_code

        receiver = WebhookReceiver(synchronize_port=synchronizer)
        http_server = WebhookHTTPServer(
            webhook_receiver=receiver,
            host=settings.webhook_host,
            port=settings.webhook_port,
            api_key=settings.webhook_api_key or None,
            require_auth=settings.webhook_require_auth,
            request_timeout=settings.sm_timeout_seconds * 2,
        )
        await http_server.start()
        try:
            while True:
                await asyncio.sleep(1)
        finally:
            await http_server.stop()

    finally:
        await trigger.drain()
        await protocol.close()
        await store.close_pool()


def main() -> None:
    """Application entry point.

    Command-line arguments are applicant identifiers for "once" mode.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error, or a failed synchronization
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    try:
        exit_code = asyncio.run(bootstrap(sys.argv[1:]))
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except asyncio.CancelledError:
        logger.info("Graceful shutdown completed")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
