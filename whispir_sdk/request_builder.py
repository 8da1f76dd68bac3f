"""Request Builder - Turns a configuration snapshot into a PreparedRequest.

Covers URL construction, per-resource header negotiation and credential
scoping. Nothing here touches the network.
"""

from __future__ import annotations

from typing import Generator

import httpx

from whispir_sdk.errors import ConfigurationError, EncodingError
from whispir_sdk.models import (
    ClientConfig,
    Credentials,
    EndpointTarget,
    PreparedRequest,
    ResourceKind,
)


MESSAGE_MEDIA_TYPE_V1 = "application/vnd.whispir.message-v1+json"
WORKSPACE_MEDIA_TYPE_V1 = "application/vnd.whispir.workspace-v1+json"

_MEDIA_TYPES: dict[ResourceKind, str] = {
    ResourceKind.MESSAGES: MESSAGE_MEDIA_TYPE_V1,
    ResourceKind.WORKSPACES: WORKSPACE_MEDIA_TYPE_V1,
}


class ScopedBasicAuth(httpx.Auth):
    """Basic auth limited to one host.

    With scope_host=None the credentials go to every host. Otherwise they are
    only attached when the request host matches, on any port.
    """

    def __init__(self, username: str, password: str, scope_host: str | None = None) -> None:
        self._basic = httpx.BasicAuth(username, password)
        self._scope_host = _strip_port(scope_host).lower() if scope_host else None

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self._scope_host is None or request.url.host == self._scope_host:
            yield from self._basic.auth_flow(request)
        else:
            yield request


def _strip_port(host: str) -> str:
    # httpx reports IPv6 hosts without brackets
    if host.startswith("["):
        return host[1:].split("]", 1)[0]
    return host.rsplit(":", 1)[0] if ":" in host else host


def parse_resource(resource: str | ResourceKind) -> ResourceKind:
    """Map a resource string onto ResourceKind.

    Raises:
        ConfigurationError: If the resource is not messages or workspaces.
    """
    try:
        return ResourceKind(resource)
    except ValueError as e:
        raise ConfigurationError(
            f"Unsupported resource kind '{resource}'. Expecting workspaces or messages."
        ) from e


def select_headers(resource: str | ResourceKind) -> dict[str, str]:
    """Content-Type and Accept headers for a resource, both the same media type."""
    media_type = _MEDIA_TYPES[parse_resource(resource)]
    return {"Content-Type": media_type, "Accept": media_type}


def build_url(config: ClientConfig, workspace_id: str | None, resource: str | ResourceKind) -> str:
    """Render the full request URL for the current host and API key."""
    return _build_target(config, workspace_id, resource).url


def _build_target(
    config: ClientConfig,
    workspace_id: str | None,
    resource: str | ResourceKind,
) -> EndpointTarget:
    resource_path = resource.value if isinstance(resource, ResourceKind) else resource
    return EndpointTarget.for_host(
        host=config.host,
        resource=resource_path,
        apikey=config.apikey,
        workspace_id=workspace_id,
    )


def resolve_credentials(config: ClientConfig) -> tuple[Credentials, str | None]:
    """Credentials plus the host they are scoped to (None in debug mode).

    Debug hosts vary between test environments, so debug mode sends the
    credentials anywhere.
    """
    credentials = Credentials(username=config.username, password=config.password)
    scope = None if config.debug else config.host
    return credentials, scope


def build_auth(request: PreparedRequest) -> ScopedBasicAuth:
    return ScopedBasicAuth(
        request.credentials.username,
        request.credentials.password,
        request.auth_scope,
    )


def build_request(
    config: ClientConfig,
    method: str,
    resource: str | ResourceKind,
    workspace_id: str | None = None,
    body: str | None = None,
) -> PreparedRequest:
    """Assemble everything the executor needs for one call.

    Headers are selected first so an unsupported resource fails before any
    other work is done.

    Raises:
        ConfigurationError: If the resource kind is unsupported.
        EncodingError: If the body cannot be encoded as UTF-8.
    """
    headers = select_headers(resource)
    target = _build_target(config, workspace_id, resource)

    content: bytes | None = None
    if body is not None:
        try:
            content = body.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingError(f"Could not encode request body: {e}") from e

    credentials, scope = resolve_credentials(config)

    return PreparedRequest(
        method=method.upper(),
        target=target,
        headers=headers,
        content=content,
        credentials=credentials,
        auth_scope=scope,
        proxy=config.proxy,
    )
