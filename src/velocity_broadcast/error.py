# velocity_broadcast/error.py
"""Defines the exception hierarchy used throughout VelocityBroadcast.

Every exception raised by this package derives from `VBroadcastError`, so
callers at the host boundary can catch a single type. None of these errors
are fatal to the host proxy: the settings store, the update checker and the
command dispatcher all recover from them locally.
"""


class VBroadcastError(Exception):
    """Base class for all VelocityBroadcast errors."""

    def __init__(self, message: str = "An unexpected error occurred."):
        self.message = message
        super().__init__(message)

    def __str__(self):
        return self.message


# --- Configuration ---


class ConfigurationError(VBroadcastError):
    """Raised when the settings file holds values that cannot be used."""


class ConfigIOError(ConfigurationError):
    """Raised when the settings file or its directory cannot be read or written."""

    def __init__(self, path: str, message: str = "Settings file I/O failed"):
        self.path = path
        super().__init__(f"{message}: {path}")


# --- Network ---


class NetworkError(VBroadcastError):
    """Raised when the remote version endpoint cannot be reached or answers badly."""

    def __init__(self, url: str, message: str = "Version check request failed"):
        self.url = url
        super().__init__(f"{message}: {url}")


# --- User input ---


class UserInputError(VBroadcastError):
    """Raised for invalid arguments supplied by the command invoker."""


class MissingArgumentError(UserInputError):
    """Raised when a command requires text and none was supplied."""


class PermissionDeniedError(UserInputError):
    """Raised when the invoking source lacks the permission for an action."""

    def __init__(self, permission: str, message: str = "You do not have permission"):
        self.permission = permission
        super().__init__(f"{message} ({permission}).")
