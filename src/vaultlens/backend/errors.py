"""Backend command errors."""


class BackendError(Exception):
    """Base exception for failed backend commands."""


class BackendUnavailableError(BackendError):
    """Raised when the backend cannot be reached or does not answer in time."""


class CommandFailedError(BackendError):
    """Raised when the backend rejects a command.

    Attributes:
        command: Name of the rejected command.
        message: Error text reported by the backend.
    """

    def __init__(self, command: str, message: str) -> None:
        super().__init__(message)
        self.command = command
        self.message = message


class ProtocolError(BackendError):
    """Raised when a backend response does not have the expected shape."""
