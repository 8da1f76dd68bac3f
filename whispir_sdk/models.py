"""Internal data models for the Whispir client.

All models use Pydantic v2. Configuration and request descriptors are frozen:
a request is built from one configuration snapshot and never mutated after.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


PRODUCTION_HOST = "api.whispir.com"


# =============================================================================
# Resources
# =============================================================================


class ResourceKind(str, Enum):
    """API resource collections understood by the client."""

    MESSAGES = "messages"
    WORKSPACES = "workspaces"


# =============================================================================
# Configuration Models
# =============================================================================


class Credentials(BaseModel):
    """Basic-auth credentials."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    username: str = Field(description="Whispir account username")
    password: str = Field(description="Whispir account password")


class ProxyConfig(BaseModel):
    """HTTP or HTTPS proxy that outgoing requests are routed through.

    Frozen so it can key the executor's per-proxy client pool. Reachability
    is not checked here; a dead proxy only shows up when a request is sent.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    host: str = Field(min_length=1, description="Proxy hostname or IP")
    port: int = Field(ge=1, le=65535, description="Proxy port")
    use_https: bool = Field(default=False, description="Connect to the proxy over https")

    @property
    def url(self) -> str:
        scheme = "https" if self.use_https else "http"
        return f"{scheme}://{self.host}:{self.port}"


class ClientConfig(BaseModel):
    """Immutable snapshot of everything a request needs from the client.

    Setters on WhispirClient replace the whole snapshot instead of mutating it,
    so an in-flight request always sees one consistent configuration.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    apikey: str = Field(min_length=1, description="Whispir API key")
    username: str = Field(min_length=1, description="Whispir account username")
    password: str = Field(min_length=1, description="Whispir account password")
    debug_host: str | None = Field(
        default=None,
        description="Alternate host such as xxxx.whispir.net:8080; enables debug mode",
    )
    proxy: ProxyConfig | None = Field(default=None, description="Optional outbound proxy")

    @property
    def debug(self) -> bool:
        return bool(self.debug_host)

    @property
    def host(self) -> str:
        """Debug host when debug mode is on, otherwise the production host."""
        if self.debug:
            return self.debug_host  # type: ignore[return-value]
        return PRODUCTION_HOST


# =============================================================================
# Request / Response Models
# =============================================================================


class EndpointTarget(BaseModel):
    """Fully resolved location of one API call."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    scheme: str = Field(description="http or https")
    host: str = Field(description="Host, optionally with :port")
    workspace_id: str = Field(default="", description="Workspace segment; empty for none")
    resource: str = Field(description="Resource path segment")
    apikey: str = Field(description="API key sent as the apikey query parameter")

    @classmethod
    def for_host(
        cls,
        host: str,
        resource: str,
        apikey: str,
        workspace_id: str | None = None,
    ) -> EndpointTarget:
        """Build a target, picking plain http only for hosts containing 'app'."""
        scheme = "http" if "app" in host else "https"
        return cls(
            scheme=scheme,
            host=host,
            workspace_id=workspace_id or "",
            resource=resource,
            apikey=apikey,
        )

    @property
    def url(self) -> str:
        # Workspace ids and the key are inserted verbatim; the upstream API
        # expects this exact shape.
        if self.workspace_id:
            path = f"/workspaces/{self.workspace_id}/{self.resource}"
        else:
            path = f"/{self.resource}"
        return f"{self.scheme}://{self.host}{path}?apikey={self.apikey}"


class PreparedRequest(BaseModel):
    """One request ready for the executor: target, headers, body and auth."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    method: str = Field(description="GET or POST")
    target: EndpointTarget = Field(description="Where the request goes")
    headers: dict[str, str] = Field(default_factory=dict, description="Content-Type and Accept")
    content: bytes | None = Field(default=None, description="Encoded request body")
    credentials: Credentials = Field(description="Basic-auth credentials")
    auth_scope: str | None = Field(
        default=None,
        description="Host the credentials are limited to; None means any host",
    )
    proxy: ProxyConfig | None = Field(default=None, description="Proxy to route through")

    @property
    def url(self) -> str:
        return self.target.url


class WhispirResponse(BaseModel):
    """Outcome of the final attempt of one request.

    status_code stays 0 when no status line was obtained; error then carries
    the transport failure that was logged.
    """

    model_config = ConfigDict(extra="forbid")

    status_code: int = Field(default=0, description="HTTP status code, 0 if none")
    body: str = Field(default="", description="Response body text")
    error: str | None = Field(default=None, description="Transport failure, if any")

    @property
    def received(self) -> bool:
        return self.status_code != 0
