"""
Daybook exception hierarchy.

All daybook exceptions inherit from DaybookError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
"""


class DaybookError(Exception):
    """Base exception class for all daybook errors."""


class ConfigurationError(DaybookError):
    """Raised for configuration errors (missing keys, invalid values)."""


class APIError(DaybookError):
    """Raised for API communication errors."""


class RemoteError(APIError):
    """Raised when the remote entry service or session provider fails."""


class DataProcessingError(DaybookError):
    """Raised for malformed records coming back from a backend."""


class AuthenticationError(DaybookError):
    """Raised for authentication errors."""


class Unauthenticated(AuthenticationError):
    """Raised when an operation needs an identity and none is present."""


class ValidationError(DaybookError):
    """Raised when user input is rejected before reaching a backend."""
