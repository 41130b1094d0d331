"""Exception types raised by the iDRAC6 client.

Every error carries optional `host` and `operation` context so callers can
diagnose a failure without replaying it. Decode-level shape mismatches are not
represented here: decoders degrade to empty/zero values instead of raising.
"""

from __future__ import annotations


class IdracError(Exception):
    """Base exception for iDRAC6 client failures.

    Attributes:
        host: Controller host the failing request targeted, when known.
        operation: Logical operation name (for example `get_power_state`).
    """

    def __init__(
        self,
        message: str,
        *,
        host: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.host = host
        self.operation = operation
        context = ", ".join(
            f"{label}={value}"
            for label, value in (("host", host), ("operation", operation))
            if value
        )
        super().__init__(f"{message} ({context})" if context else message)


class SessionBootstrapError(IdracError):
    """No session identifier could be obtained from the controller."""


class AuthenticationFailed(IdracError):
    """The controller rejected the supplied credentials.

    Attributes:
        auth_result: Raw `authResult` value, when the controller sent one.
        error_message: Human-readable `errorMsg`, when the controller sent one.
    """

    def __init__(
        self,
        message: str,
        *,
        auth_result: str | None = None,
        error_message: str | None = None,
        host: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.auth_result = auth_result
        self.error_message = error_message
        if error_message:
            message = f"{message}: {error_message}"
        super().__init__(message, host=host, operation=operation)


class AuthenticationExpired(IdracError):
    """The session expired and the single reauthentication attempt failed."""


class UnexpectedStatus(IdracError):
    """The controller answered with a non-success, non-401 HTTP status.

    Attributes:
        status: HTTP status code.
    """

    def __init__(
        self,
        status: int,
        *,
        host: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.status = status
        super().__init__(
            f"Unexpected HTTP status {status}", host=host, operation=operation
        )


class UnknownAction(IdracError, ValueError):
    """A power action name outside the supported set was requested.

    Attributes:
        action: The rejected action name.
        valid: Supported action names.
    """

    def __init__(self, action: str, *, valid: tuple[str, ...] = ()) -> None:
        self.action = action
        self.valid = tuple(valid)
        message = f"Unknown power action: {action!r}"
        if valid:
            message = f"{message} (valid: {', '.join(valid)})"
        super().__init__(message, operation="set_power")


class IdracTimeoutError(IdracError):
    """A request exceeded its bounded timeout."""


class IdracTransportError(IdracError):
    """Network, TLS or connection error communicating with the controller."""


class IdracParseError(IdracError):
    """Response body was not XML at all."""
