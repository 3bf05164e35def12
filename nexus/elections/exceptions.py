"""
Custom exceptions for the elections module.

Every exception carries the HTTP status it is reported with; the handlers
in nexus.middleware turn them into the response envelope.
"""


class NexusError(Exception):
    """Base class for election-related exceptions"""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ValidationError(NexusError):
    """Malformed or missing input"""

    status_code = 400

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class AuthenticationError(NexusError):
    status_code = 401


class PermissionDenied(NexusError):
    """Role or ownership check failed"""

    status_code = 403


class NotFound(NexusError):
    """
    Exception raised when a referenced entity does not exist

    Attributes:
        model_name -- name of the model
        identifier -- id used to look the element up
    """

    status_code = 404

    def __init__(self, model_name: str, identifier: str | None = None, message: str | None = None):
        self.model_name = model_name
        self.identifier = identifier
        if message is None:
            message = f"{model_name} not found"
            if identifier is not None:
                message = f"{model_name} with ID {identifier} not found"
        super().__init__(message)


class InvalidState(NexusError):
    """Action not valid for the current status of the record"""

    status_code = 400


class Conflict(NexusError):
    """Uniqueness violation or double processing"""

    status_code = 409
