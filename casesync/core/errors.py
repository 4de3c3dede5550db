"""Exceptions raised across the port boundaries."""


class TransportFault(Exception):
    """Raised by a protocol adapter when the remote call could not complete.

    Covers connection failures, timeouts and malformed HTTP exchanges.
    A response with an unsuccessful status code is not a transport fault.
    """


class MessageTemplateNotFoundError(LookupError):
    """Raised when a message template or one of its operations is unknown."""

    def __init__(self, template_name: str, operation: str | None = None):
        self.template_name = template_name
        self.operation = operation
        if operation is None:
            message = f"Message template not found: {template_name}"
        else:
            message = (
                f"Operation {operation!r} not defined on message template "
                f"{template_name!r}"
            )
        super().__init__(message)
