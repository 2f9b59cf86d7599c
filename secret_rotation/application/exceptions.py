"""Application layer exceptions."""


class ApplicationError(Exception):
    """Base exception for application errors."""


class DirectoryError(ApplicationError):
    """Base exception for credential directory failures."""


class DirectoryUnavailableError(DirectoryError):
    """Raised when listing applications and credentials fails."""


class DirectoryWriteError(DirectoryError):
    """Raised when creating or deleting a credential fails."""


class RotationCancelledError(ApplicationError):
    """Raised when a run is cancelled before issuing further directory calls."""
