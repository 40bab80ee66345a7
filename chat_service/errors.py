"""Error taxonomy shared by services and routers."""


class ChatServiceError(Exception):
    """Base class for errors the HTTP boundary knows how to report."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ChatServiceError, ValueError):
    """Malformed or missing input, rejected before any write."""

    status_code = 400


class AuthorizationError(ChatServiceError):
    """Authenticated caller is not a member of the target conversation."""

    status_code = 403


class NotFoundError(ChatServiceError):
    """Referenced user, conversation or message does not exist."""

    status_code = 404


class TransientStoreError(ChatServiceError):
    """The persistent store is unreachable or timed out."""

    status_code = 503
