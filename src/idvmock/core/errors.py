class IdvMockError(Exception):
    """Base error for all user-facing idv-mock exceptions."""

    status_code = 500
    error_code = "server_error"
    # OAuth2 endpoints report the message as error_description.
    message_field = "message"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        message_field: str | None = None,
    ) -> None:
        super().__init__(message)
        if error_code is not None:
            self.error_code = error_code
        if message_field is not None:
            self.message_field = message_field


class ProjectNotInitializedError(IdvMockError):
    """Raised when the data directory or database is missing."""


class ValidationError(IdvMockError):
    """Raised when a request fails model invariants."""

    status_code = 400
    error_code = "invalid_request"


class UnsupportedGrantTypeError(IdvMockError):
    """Raised when an OAuth2 grant other than client_credentials is requested."""

    status_code = 400
    error_code = "unsupported_grant_type"
    message_field = "error_description"


class AuthenticationError(IdvMockError):
    """Raised when basic or bearer authentication fails."""

    status_code = 401
    error_code = "unauthorized"


class AccountNotFoundError(IdvMockError):
    """Raised when an account id does not resolve."""

    status_code = 404
    error_code = "not_found"


class WorkflowNotFoundError(IdvMockError):
    """Raised when a workflow execution does not resolve."""

    status_code = 404
    error_code = "not_found"


class InvalidTimestampError(IdvMockError):
    """Raised when a stored timestamp cannot be parsed."""

    error_code = "invalid_timestamp"
