"""Domain exceptions.

Each carries the HTTP status it maps to; the API layer turns them into the
``{"success": false, "error": ...}`` envelope.
"""


class FlowGenieError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(FlowGenieError):
    """Unknown agent, action or user."""

    status_code = 404


class ValidationError(FlowGenieError):
    """Missing or malformed required fields."""

    status_code = 400


class UnsupportedCommandError(ValidationError):
    """Command type outside the closed set of known commands."""

    def __init__(self, command_type: str):
        super().__init__(f"Unknown command type: {command_type}")
        self.command_type = command_type


class InvalidFormatError(FlowGenieError):
    """Completion output that does not contain a parsable command list."""

    status_code = 400


class PolicyViolationError(FlowGenieError):
    """Command blocked by the agent's own settings."""

    status_code = 403


class AuthError(FlowGenieError):
    status_code = 401


class ExecutionError(FlowGenieError):
    """The blockchain collaborator call failed or timed out."""

    status_code = 500


class ConfigError(FlowGenieError):
    status_code = 500
