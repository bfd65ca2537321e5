"""
Exception classes for the orchestrator API client.

This module defines the failure taxonomy of a single client invocation:
- MissingParameterError: A command was invoked without a required parameter
- InvalidParameterError: A parameter was given but is malformed
- UnsupportedCommandError: The command name is not in the command table
- NoLeaderFoundError: No configured endpoint answered the leader check
- ApiUnreachableError: Every retry attempt failed at the transport level
- ApplicationError: The service answered with an error envelope
- ProjectionError: A successful payload has an unexpected shape

All of them derive from OrchestratorClientError so the CLI can report any
failure with a single except clause. Context is stored in attributes for
callers that want more than the message.
"""

import json
from typing import Any


class OrchestratorClientError(Exception):
    """Base class for all client failures."""


class MissingParameterError(OrchestratorClientError):
    """
    Raised when a command is missing a required parameter.

    Raised before any network call is attempted.

    Attributes:
        command: The command being executed
        parameter: The name of the missing parameter
    """

    def __init__(self, command: str, parameter: str) -> None:
        self.command = command
        self.parameter = parameter
        super().__init__(f"{command}: missing required parameter '{parameter}'")


class InvalidParameterError(OrchestratorClientError):
    """
    Raised when a parameter is present but cannot be used (e.g. a bad port).

    Attributes:
        command: The command being executed
        parameter: The name of the offending parameter
        reason: Why the value was rejected
    """

    def __init__(self, command: str, parameter: str, reason: str) -> None:
        self.command = command
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"{command}: invalid {parameter}: {reason}")


class UnsupportedCommandError(OrchestratorClientError):
    """
    Raised when a command name has no entry in the command table.

    Attributes:
        command: The command name as given by the user
    """

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Unsupported command: {command}")


class NoLeaderFoundError(OrchestratorClientError):
    """
    Raised when leader resolution fails.

    Either no endpoint answered the leader check with HTTP 200, or the
    endpoint set was empty.

    Attributes:
        endpoints: The endpoints that were configured
    """

    def __init__(self, endpoints: tuple[str, ...] | list[str]) -> None:
        self.endpoints = tuple(endpoints)
        if self.endpoints:
            detail = ", ".join(self.endpoints)
            message = f"Cannot determine leader from {detail}"
        else:
            message = "Cannot determine leader: no API endpoints configured"
        super().__init__(message)


class ApiUnreachableError(OrchestratorClientError):
    """
    Raised when all attempts to call the API failed at the transport level.

    Attributes:
        endpoint: The leader endpoint that was called
        path: The API path that was requested
        attempts: How many attempts were made
        last_error: String form of the last transport failure
    """

    def __init__(self, endpoint: str, path: str, attempts: int, last_error: str = "") -> None:
        self.endpoint = endpoint
        self.path = path
        self.attempts = attempts
        self.last_error = last_error
        message = f"Cannot access orchestrator at {endpoint} after {attempts} attempts"
        if last_error:
            message = f"{message}: {last_error}"
        super().__init__(message)


class ApplicationError(OrchestratorClientError):
    """
    Raised when the service returns an envelope whose Code marks an error.

    Attributes:
        message: The normalized Message field
        details: The Details field, None when absent or null
    """

    def __init__(self, message: str, details: Any = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def details_text(self) -> str | None:
        """Render details as text, or None when there are none."""
        if self.details is None:
            return None
        if isinstance(self.details, str):
            return self.details
        return json.dumps(self.details, indent=2)


class ProjectionError(OrchestratorClientError):
    """Raised when a successful payload does not have the shape a command expects."""
