"""WhispirClient - Public entry point wrapping the request pipeline.

Configuration lives in an immutable ClientConfig. Setters swap in a new
snapshot under a lock and every request reads exactly one snapshot, so a
setter racing an in-flight request never produces a half-updated request.
"""

from __future__ import annotations

import logging
from threading import Event, Lock
from typing import Any, Mapping

import httpx

from whispir_sdk.errors import AUTH_FAILED_ERROR, NO_AUTH_ERROR, ConfigurationError
from whispir_sdk.executor import Executor
from whispir_sdk.messages import build_message_body
from whispir_sdk.models import (
    ClientConfig,
    PreparedRequest,
    ProxyConfig,
    ResourceKind,
    WhispirResponse,
)
from whispir_sdk.request_builder import build_request
from whispir_sdk.workspaces import parse_workspaces


logger = logging.getLogger(__name__)


class WhispirClient:
    """Client for the Whispir messaging API.

    Usage:
        with WhispirClient(apikey, username, password) as client:
            status = client.send_message("+61400000000", "Hello", "Test message")
            workspaces = client.get_workspaces()
    """

    def __init__(
        self,
        apikey: str,
        username: str,
        password: str,
        debug_host: str | None = "",
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            apikey: Whispir API key.
            username: Whispir account username.
            password: Whispir account password.
            debug_host: Alternate host (e.g. xxxx.whispir.net:8080). Empty
                        means the production API.
            transport: Optional httpx transport, mainly for tests.

        Raises:
            ConfigurationError: If apikey, username or password is missing or empty.
        """
        if not apikey or not username or not password:
            raise ConfigurationError(NO_AUTH_ERROR)

        self._config = ClientConfig(
            apikey=apikey,
            username=username,
            password=password,
            debug_host=debug_host or None,
        )
        self._config_lock = Lock()
        self._executor = Executor(transport=transport)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> "WhispirClient":
        client = cls(
            config.apikey,
            config.username,
            config.password,
            config.debug_host,
            transport=transport,
        )
        if config.proxy is not None:
            client._replace_config(proxy=config.proxy)
        return client

    def __enter__(self) -> "WhispirClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._executor.close()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        with self._config_lock:
            return self._config

    def _replace_config(self, **changes: Any) -> None:
        # model_copy does not re-run validation
        with self._config_lock:
            self._config = self._config.model_copy(update=changes)

    def set_apikey(self, apikey: str) -> None:
        self._replace_config(apikey=apikey)

    def set_username(self, username: str) -> None:
        self._replace_config(username=username)

    def set_password(self, password: str) -> None:
        self._replace_config(password=password)

    def set_debug_host(self, debug_host: str) -> None:
        """Non-empty enables debug mode against that host; empty disables it."""
        self._replace_config(debug_host=debug_host or None)

    def set_proxy(self, host: str, port: int, use_https: bool = False) -> None:
        """Route all subsequent requests through a proxy.

        Raises:
            pydantic.ValidationError: If host is empty or port out of range.
        """
        self._replace_config(proxy=ProxyConfig(host=host, port=port, use_https=use_https))

    def clear_proxy(self) -> None:
        self._replace_config(proxy=None)

    # ------------------------------------------------------------------
    # Raw resource access
    # ------------------------------------------------------------------

    def get(
        self,
        resource: str | ResourceKind,
        workspace_id: str | None = "",
        cancel: Event | None = None,
    ) -> WhispirResponse:
        """GET a resource, optionally inside a workspace."""
        request = build_request(self.config, "GET", resource, workspace_id)
        return self._execute(request, cancel)

    def post(
        self,
        resource: str | ResourceKind,
        workspace_id: str | None,
        json_content: str,
        cancel: Event | None = None,
    ) -> int:
        """POST a JSON document and return the status code (0 if no response)."""
        request = build_request(self.config, "POST", resource, workspace_id, json_content)
        return self._execute(request, cancel).status_code

    def _execute(self, request: PreparedRequest, cancel: Event | None) -> WhispirResponse:
        response = self._executor.execute(request, cancel=cancel)
        if response.status_code == 401:
            logger.warning(AUTH_FAILED_ERROR)
        return response

    # ------------------------------------------------------------------
    # Messages / Workspaces
    # ------------------------------------------------------------------

    def send_message(
        self,
        recipient: str,
        subject: str,
        content: str | Mapping[str, str],
        workspace_id: str | None = "",
        options: Mapping[str, str] | None = None,
    ) -> int:
        """Send a message and return the HTTP status code (202 on success).

        Raises:
            EncodingError: If the message body cannot be serialized.
        """
        body = build_message_body(recipient, subject, content, options)
        return self.post(ResourceKind.MESSAGES, workspace_id, body)

    def get_workspaces(self) -> dict[str, str]:
        """Return a mapping of workspace name to workspace id."""
        response = self.get(ResourceKind.WORKSPACES)
        if response.status_code != 200:
            logger.warning("Could not list workspaces (status %d)", response.status_code)
            return {}
        return parse_workspaces(response.body)
