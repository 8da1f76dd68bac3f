"""Client wrapper for the Whispir messaging API."""

from whispir_sdk.client import WhispirClient
from whispir_sdk.errors import (
    AUTH_FAILED_ERROR,
    NO_AUTH_ERROR,
    ConfigurationError,
    EncodingError,
    ResourceReleaseError,
    WhispirError,
)
from whispir_sdk.models import ClientConfig, ProxyConfig, ResourceKind, WhispirResponse

__all__ = [
    "AUTH_FAILED_ERROR",
    "NO_AUTH_ERROR",
    "ClientConfig",
    "ConfigurationError",
    "EncodingError",
    "ProxyConfig",
    "ResourceKind",
    "ResourceReleaseError",
    "WhispirClient",
    "WhispirError",
    "WhispirResponse",
]
