"""
Error types shared by the backend client, the auth client and the views.

Every message is meant to be shown to the user as-is.
"""


class AcademyError(Exception):
    """Base class for all application errors"""


class ConfigError(AcademyError):
    """Missing or invalid backend configuration"""


class BackendError(AcademyError):
    """A table or auth request failed (transport, HTTP status or payload)"""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class AuthError(BackendError):
    """The auth service rejected a request"""


class ProfileNotFoundError(AuthError):
    """An authenticated identity has no row in the users table"""

    def __init__(self, message="User profile not found. Please contact an administrator."):
        super().__init__(message)


class NoActiveSessionError(AcademyError):
    def __init__(self, message="No user is logged in"):
        super().__init__(message)


class ValidationError(AcademyError):
    """Form input rejected before any remote call"""
