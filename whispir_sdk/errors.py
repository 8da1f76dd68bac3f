"""Exception types raised by the Whispir client.

Connection failures are deliberately absent: the executor logs them and
returns a WhispirResponse with status_code 0 instead of raising.
"""

from __future__ import annotations


NO_AUTH_ERROR = (
    "Whispir API Authentication failed. API Key, Username or Password was not provided."
)
AUTH_FAILED_ERROR = (
    "Whispir API Authentication failed. API Key, Username or Password were "
    "provided but were not correct."
)


class WhispirError(Exception):
    """Base class for Whispir client errors."""


class ConfigurationError(WhispirError):
    """Raised for missing credentials, unknown resources, or bad config files."""


class EncodingError(WhispirError):
    """Raised when a request body cannot be serialized or encoded."""


class ResourceReleaseError(ConfigurationError):
    """Raised when closing an HTTP response or transport fails."""
